import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))

from bepawa_care import models
from bepawa_care.ai import session_memory
from bepawa_care.ai.provider_factory import get_embeddings_provider
from bepawa_care.ai.providers.stub import StubProvider
from bepawa_care.config.care import get_care_config
from bepawa_care.db import Base

SQLALCHEMY_DATABASE_URL = "sqlite://"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_CARE_ENV = [
    "CARE_CONFIG_FILE",
    "CARE_KNOWLEDGE_BACKEND",
    "CARE_KNOWLEDGE_MIN_SCORE",
    "CARE_TRANSLATE_BACKEND",
    "CARE_FUNCTIONS_URL",
    "CARE_FUNCTIONS_KEY",
    "CARE_SESSION_TTL_MINUTES",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
]


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _CARE_ENV:
        monkeypatch.delenv(key, raising=False)
    get_care_config.cache_clear()
    yield
    get_care_config.cache_clear()


# --------------------
# Session memory
# --------------------


def test_append_turns_keeps_last_ten():
    db = TestingSessionLocal()
    try:
        for i in range(7):
            session_memory.append_turns(db, "web", "s1", f"user {i}", f"bot {i}")
        turns = session_memory.load_turns(db, "web", "s1")
        assert len(turns) == 10
        assert turns[0]["text"] == "user 2"
        assert turns[-1]["role"] == "bot"
        assert turns[-1]["text"] == "bot 6"
        assert turns[-1]["category"] == "general"
    finally:
        db.close()


def test_sessions_are_scoped_by_channel():
    db = TestingSessionLocal()
    try:
        session_memory.append_turns(db, "web", "same-id", "hello", "hi")
        assert session_memory.load_turns(db, "whatsapp", "same-id") == []
        assert len(session_memory.load_turns(db, "web", "same-id")) == 2
    finally:
        db.close()


def test_expired_session_is_dropped():
    db = TestingSessionLocal()
    try:
        session_memory.append_turns(db, "whatsapp", "2557", "hello", "hi", user_ref="2557")
        row = db.query(models.CareSession).one()
        assert row.user_ref == "2557"
        row.expires_at = datetime.utcnow() - timedelta(minutes=1)
        db.commit()

        assert session_memory.load_turns(db, "whatsapp", "2557") == []
        assert db.query(models.CareSession).count() == 0
    finally:
        db.close()


def test_session_ttl_follows_config(monkeypatch):
    monkeypatch.setenv("CARE_SESSION_TTL_MINUTES", "5")
    get_care_config.cache_clear()
    db = TestingSessionLocal()
    try:
        session_memory.append_turns(db, "web", "ttl", "hello", "hi")
        row = db.query(models.CareSession).one()
        assert row.expires_at <= datetime.utcnow() + timedelta(minutes=5)
        assert row.expires_at > datetime.utcnow() + timedelta(minutes=4)
    finally:
        db.close()


def test_new_session_ids_are_unique():
    assert session_memory.new_session_id() != session_memory.new_session_id()


# --------------------
# Configuration
# --------------------


def test_defaults_without_file(monkeypatch, tmp_path):
    monkeypatch.setenv("CARE_CONFIG_FILE", str(tmp_path / "missing.yaml"))
    cfg = get_care_config()
    assert cfg.knowledge_backend == "local"
    assert cfg.translate_backend == "none"
    assert cfg.emergency_number == "112"
    assert cfg.functions_url == ""
    assert cfg.session_ttl_minutes == 30


def test_yaml_file_then_env_precedence(monkeypatch, tmp_path):
    path = tmp_path / "care.yaml"
    path.write_text(
        "care:\n"
        "  knowledge_backend: remote  # edge function\n"
        "  knowledge_min_score: 0.5\n"
        "  translate_backend: google\n"
        "  emergency_number: \"999\"\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("CARE_CONFIG_FILE", str(path))
    cfg = get_care_config()
    assert cfg.knowledge_backend == "remote"
    assert cfg.knowledge_min_score == pytest.approx(0.5)
    assert cfg.translate_backend == "google"
    assert cfg.emergency_number == "999"

    monkeypatch.setenv("CARE_KNOWLEDGE_BACKEND", "none")
    get_care_config.cache_clear()
    assert get_care_config().knowledge_backend == "none"


def test_invalid_backends_fall_back_to_defaults(monkeypatch, tmp_path):
    monkeypatch.setenv("CARE_CONFIG_FILE", str(tmp_path / "missing.yaml"))
    monkeypatch.setenv("CARE_KNOWLEDGE_BACKEND", "elastic")
    monkeypatch.setenv("CARE_TRANSLATE_BACKEND", "deepl")
    cfg = get_care_config()
    assert cfg.knowledge_backend == "local"
    assert cfg.translate_backend == "none"


def test_functions_url_derived_from_supabase(monkeypatch, tmp_path):
    monkeypatch.setenv("CARE_CONFIG_FILE", str(tmp_path / "missing.yaml"))
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co/")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
    cfg = get_care_config()
    assert cfg.functions_url == "https://project.supabase.co/functions/v1"
    assert cfg.functions_key == "anon"


def test_embeddings_provider_factory(monkeypatch):
    monkeypatch.setenv("EMBEDDINGS_PROVIDER", "stub")
    get_embeddings_provider.cache_clear()
    try:
        assert isinstance(get_embeddings_provider(), StubProvider)
        monkeypatch.setenv("EMBEDDINGS_PROVIDER", "bogus")
        get_embeddings_provider.cache_clear()
        with pytest.raises(RuntimeError):
            get_embeddings_provider()
    finally:
        get_embeddings_provider.cache_clear()


# --------------------
# Schema bootstrap
# --------------------


def _fresh_engine():
    return create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)


def test_init_database_creates_care_tables_from_models(monkeypatch):
    from bepawa_care import main

    fresh = _fresh_engine()
    monkeypatch.setattr(main, "engine", fresh)
    monkeypatch.setenv("DB_AUTO_CREATE", "1")
    main.init_database()

    inspector = inspect(fresh)
    assert set(inspector.get_table_names()) == {"care_knowledge", "care_sessions", "care_interactions"}
    knowledge_cols = {c["name"] for c in inspector.get_columns("care_knowledge")}
    assert {"topic", "lang", "embedding", "source_url"} <= knowledge_cols
    assert "user_ref" in {c["name"] for c in inspector.get_columns("care_interactions")}


def test_init_database_without_auto_create_requires_migrations(monkeypatch):
    from bepawa_care import main

    fresh = _fresh_engine()
    monkeypatch.setattr(main, "engine", fresh)
    monkeypatch.setenv("DB_AUTO_CREATE", "0")
    with pytest.raises(RuntimeError, match="alembic upgrade head"):
        main.init_database()
    assert inspect(fresh).get_table_names() == []
