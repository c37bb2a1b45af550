from __future__ import annotations

import logging
from datetime import datetime
from functools import partial
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from bepawa_care import models, schemas
from bepawa_care.ai import knowledge, session_memory, toolkit
from bepawa_care.ai.language import resolve_language
from bepawa_care.ai.orchestrator import respond
from bepawa_care.ai.topics import packs_faq, topic_suggestions
from bepawa_care.ai.types import Message
from bepawa_care.content.packs import CARE_TOPICS, EXERCISES, SCREENINGS, get_topic
from bepawa_care.db import get_db


router = APIRouter(prefix="/care", tags=["Care"])
_logger = logging.getLogger(__name__)

CHANNEL = "web"


@router.post("/chat", response_model=schemas.CareChatOut)
async def chat(payload: schemas.CareChatIn, db: Session = Depends(get_db)):
    message = (payload.message or "").strip()
    if not message:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message is required")
    session_id = (payload.session_id or "").strip() or session_memory.new_session_id()
    lang = resolve_language(payload.lang, message)

    response = await respond(
        Message(text=message, lang=lang),
        search=partial(knowledge.search_knowledge, db=db),
    )

    db.add(
        models.CareInteraction(
            channel=CHANNEL,
            session_id=session_id,
            lang=lang,
            user_text=message,
            bot_text=response.content,
            category=response.category,
            created_at=datetime.utcnow(),
        )
    )
    db.commit()
    session_memory.append_turns(db, CHANNEL, session_id, message, response.content, category=response.category)
    if response.category == "safety":
        _logger.info("care chat safety response session=%s lang=%s", session_id, lang)

    return schemas.CareChatOut(
        session_id=session_id,
        content=response.content,
        suggestions=list(response.suggestions),
        category=response.category,
        lang=lang,
    )


@router.get("/chat/{session_id}/history", response_model=list[schemas.CareTurn])
def chat_history(session_id: str, db: Session = Depends(get_db)):
    turns = session_memory.load_turns(db, CHANNEL, session_id)
    if not turns:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return [schemas.CareTurn(**t) for t in turns if t.get("role") in {"user", "bot"}]


@router.get("/topics", response_model=list[schemas.TopicOut])
def list_topics():
    return [
        schemas.TopicOut(
            id=t.id,
            name=t.name,
            labels=list(t.labels),
            faq_counts={"en": len(t.faqs_en), "sw": len(t.faqs_sw)},
        )
        for t in CARE_TOPICS
    ]


@router.get("/topics/{topic_id}/faqs", response_model=schemas.CareContentOut)
def topic_faqs(topic_id: str, lang: Literal["en", "sw"] = "en"):
    if get_topic(topic_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Topic not found")
    content = packs_faq(topic_id, lang)
    if content is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No FAQs for this topic and language")
    return schemas.CareContentOut(content=content, suggestions=list(topic_suggestions(topic_id)))


@router.get("/exercises/{exercise_id}", response_model=schemas.CareContentOut)
def exercise(exercise_id: str, lang: Literal["en", "sw"] = "en"):
    if exercise_id not in EXERCISES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")
    res = toolkit.exercise_response(exercise_id, lang)
    return schemas.CareContentOut(content=res.content, suggestions=list(res.suggestions), category=res.category)


@router.get("/screenings/{code}", response_model=schemas.CareContentOut)
def screening(code: str, lang: Literal["en", "sw"] = "en"):
    if code.upper() not in SCREENINGS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Screening not found")
    res = toolkit.screening_prompt(code, lang)
    return schemas.CareContentOut(content=res.content, suggestions=list(res.suggestions), category=res.category)


@router.post("/screenings/{code}/score", response_model=schemas.CareContentOut)
def screening_score(code: str, payload: schemas.ScreeningScoreIn):
    if code.upper() not in SCREENINGS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Screening not found")
    try:
        res = toolkit.score_screening(code, payload.values, payload.lang)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return schemas.CareContentOut(content=res.content, suggestions=list(res.suggestions), category=res.category)
