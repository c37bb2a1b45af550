from __future__ import annotations

import json
import logging
from datetime import datetime
from functools import partial

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from bepawa_care import models
from bepawa_care.ai import knowledge, session_memory
from bepawa_care.ai.language import detect_language
from bepawa_care.ai.orchestrator import respond
from bepawa_care.ai.types import Message
from bepawa_care.db import get_db
from bepawa_care.utils import whatsapp


# Public endpoint for Meta callbacks: no Authorization header, authenticity via signature.
router = APIRouter(prefix="/whatsapp", tags=["WhatsApp"])
_logger = logging.getLogger(__name__)

CHANNEL = "whatsapp"


@router.get("/webhook", response_class=PlainTextResponse)
def verify_webhook(request: Request):
    params = request.query_params
    mode = params.get("hub.mode")
    token = params.get("hub.verify_token")
    challenge = params.get("hub.challenge")

    if mode == "subscribe" and token and challenge:
        expected = whatsapp.verify_token()
        if expected and token == expected:
            return PlainTextResponse(challenge)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden: invalid verify token")
    if params.get("ping"):
        return PlainTextResponse("ok")
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Bad Request")


@router.post("/webhook")
async def inbound(request: Request, db: Session = Depends(get_db)):
    body = await request.body()
    if not whatsapp.verify_signature(body, request.headers.get("X-Hub-Signature-256")):
        _logger.warning("whatsapp webhook rejected: bad signature")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid signature")
    try:
        payload = json.loads(body or b"{}")
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload")

    handled = 0
    for item in whatsapp.extract_messages(payload):
        sender, text = item["from"], item["text"]
        lang = detect_language(text)
        response = await respond(
            Message(text=text, lang=lang),
            search=partial(knowledge.search_knowledge, db=db),
        )
        db.add(
            models.CareInteraction(
                channel=CHANNEL,
                session_id=sender,
                user_ref=sender,
                lang=lang,
                user_text=text,
                bot_text=response.content,
                category=response.category,
                created_at=datetime.utcnow(),
            )
        )
        db.commit()
        session_memory.append_turns(
            db, CHANNEL, sender, text, response.content, category=response.category, user_ref=sender
        )
        ok, error = await whatsapp.send_response(sender, response)
        if not ok:
            _logger.warning("whatsapp reply not delivered message_id=%s: %s", item["id"], error)
        handled += 1

    # Always 200 for accepted payloads so Meta does not retry.
    return {"ok": True, "handled": handled}
