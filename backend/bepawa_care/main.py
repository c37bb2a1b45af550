import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import inspect

from bepawa_care.db import Base, engine
from bepawa_care import models  # noqa: F401
from bepawa_care.ai.provider_factory import get_embeddings_provider
from bepawa_care.routes.care_routes import router as care_router
from bepawa_care.routes.whatsapp_routes import router as whatsapp_router


logging.basicConfig(
    level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _env_flag(name: str, *, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _required_tables() -> set[str]:
    return {"care_knowledge", "care_sessions", "care_interactions"}


def _assert_schema_ready() -> None:
    existing = set(inspect(engine).get_table_names())
    missing = sorted(_required_tables() - existing)
    if not missing:
        return
    raise RuntimeError(
        "Database schema is not initialized. "
        "Run `alembic upgrade head` (from the `backend/` folder), "
        f"or set DB_AUTO_CREATE=1 for a quick dev bootstrap. Missing tables: {', '.join(missing)}"
    )


def init_database() -> None:
    auto_create = _env_flag("DB_AUTO_CREATE", default=(engine.dialect.name == "sqlite"))
    if auto_create:
        Base.metadata.create_all(bind=engine)
    else:
        _assert_schema_ready()


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_database()
    try:
        yield
    finally:
        # Avoid creating a provider just to close it.
        if get_embeddings_provider.cache_info().currsize > 0:
            provider = get_embeddings_provider()
            close = getattr(provider, "aclose", None)
            if callable(close):
                await close()


app = FastAPI(title="Bepawa Care Triage Backend", lifespan=lifespan)

cors_origins = _split_csv(os.getenv("CORS_ORIGINS")) or [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
cors_origin_regex = os.getenv("CORS_ALLOW_ORIGIN_REGEX") or r"^https?://([a-z0-9-]+\.)*localhost(:\d+)?$"
# `.env` files often double-escape backslashes (e.g. `\\d` instead of `\d`); normalize so CORS preflight works.
cors_origin_regex = cors_origin_regex.replace("\\\\", "\\")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_origin_regex=cors_origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(care_router)
app.include_router(whatsapp_router)


@app.get("/")
def read_root():
    return {"message": "Backend is running"}
