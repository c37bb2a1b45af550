from __future__ import annotations

import json
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

from sqlalchemy.orm import Session

from bepawa_care import models
from bepawa_care.config.care import get_care_config


_MAX_TURNS = 10


def new_session_id() -> str:
    return str(uuid4())


def _get_row(db: Session, channel: str, session_id: str) -> models.CareSession | None:
    return (
        db.query(models.CareSession)
        .filter(
            models.CareSession.channel == channel,
            models.CareSession.session_id == session_id,
        )
        .first()
    )


def load_turns(db: Session, channel: str, session_id: str) -> list[dict[str, Any]]:
    if not session_id:
        return []
    row = _get_row(db, channel, session_id)
    if not row:
        return []
    if row.expires_at and row.expires_at < datetime.utcnow():
        db.delete(row)
        db.commit()
        return []
    try:
        data = json.loads(row.turns_json or "[]")
    except json.JSONDecodeError:
        return []
    return data if isinstance(data, list) else []


def save_turns(
    db: Session,
    channel: str,
    session_id: str,
    turns: list[dict[str, Any]],
    *,
    user_ref: str | None = None,
) -> None:
    if not session_id:
        return
    payload = json.dumps(turns[-_MAX_TURNS:], ensure_ascii=False)
    expires_at = datetime.utcnow() + timedelta(minutes=get_care_config().session_ttl_minutes)
    row = _get_row(db, channel, session_id)
    if row:
        row.turns_json = payload
        row.expires_at = expires_at
        if user_ref and not row.user_ref:
            row.user_ref = user_ref
    else:
        db.add(
            models.CareSession(
                channel=channel,
                session_id=session_id,
                user_ref=user_ref,
                turns_json=payload,
                expires_at=expires_at,
            )
        )
    db.commit()


def append_turns(
    db: Session,
    channel: str,
    session_id: str,
    user_text: str,
    bot_text: str,
    *,
    category: str = "general",
    user_ref: str | None = None,
) -> None:
    turns = load_turns(db, channel, session_id)
    now = datetime.utcnow().isoformat()
    turns.append({"role": "user", "text": user_text, "ts": now})
    turns.append({"role": "bot", "text": bot_text, "category": category, "ts": now})
    save_turns(db, channel, session_id, turns, user_ref=user_ref)
