from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from bepawa_care.db import Base
from bepawa_care.ai.types import Embedding


class CareKnowledge(Base):
    __tablename__ = "care_knowledge"

    id = Column(Integer, primary_key=True, index=True)
    topic = Column(String, index=True, nullable=False, default="general")
    lang = Column(String(2), index=True, nullable=False, default="en")  # en | sw
    title = Column(String, nullable=False)
    chunk_text = Column(Text, nullable=False)
    embedding = Column(Embedding(1536), nullable=True)
    source_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class CareSession(Base):
    __tablename__ = "care_sessions"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(String, index=True, nullable=False)
    channel = Column(String, nullable=False, default="web")  # web | whatsapp
    user_ref = Column(String, nullable=True)
    turns_json = Column(Text, nullable=False, default="[]")
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class CareInteraction(Base):
    __tablename__ = "care_interactions"

    id = Column(Integer, primary_key=True, index=True)
    channel = Column(String, index=True, nullable=False, default="web")
    session_id = Column(String, index=True, nullable=False)
    user_ref = Column(String, nullable=True)
    lang = Column(String(2), nullable=False, default="en")
    user_text = Column(Text, nullable=False)
    bot_text = Column(Text, nullable=False)
    category = Column(String, nullable=False, default="general")  # general | safety | education
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
