from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

import httpx
from sqlalchemy import text
from sqlalchemy.orm import Session

from bepawa_care import models
from bepawa_care.ai.provider_factory import get_embeddings_provider
from bepawa_care.ai.providers.stub import cosine_similarity
from bepawa_care.ai.types import KnowledgeSnippet, SearchParams
from bepawa_care.config.care import CareConfig, get_care_config
from bepawa_care.db import SessionLocal


_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KnowledgeSearchError(RuntimeError):
    status_code: int | None
    message: str

    def __str__(self) -> str:  # pragma: no cover
        prefix = f"knowledge-search error ({self.status_code})" if self.status_code is not None else "knowledge-search error"
        return f"{prefix}: {self.message}"


def _snippet_lang(value: Any) -> str | None:
    return value if value in {"en", "sw"} else None


async def _local_search(db: Session, params: SearchParams, cfg: CareConfig) -> list[KnowledgeSnippet]:
    provider = get_embeddings_provider()
    vectors = await provider.embed([params.query])
    if not vectors:
        return []
    query_vec = vectors[0]

    # pgvector ranks in the database; other dialects score the JSON embeddings in Python.
    if db.bind.dialect.name == "postgresql":
        return _pgvector_search(db, params, cfg, query_vec)

    q = db.query(models.CareKnowledge).filter(models.CareKnowledge.lang == params.lang)
    if params.topic:
        q = q.filter(models.CareKnowledge.topic == params.topic)
    scored: list[KnowledgeSnippet] = []
    for row in q.all():
        if not row.embedding:
            continue
        score = cosine_similarity(query_vec, row.embedding)
        if score < cfg.knowledge_min_score:
            continue
        scored.append(
            KnowledgeSnippet(
                id=str(row.id),
                score=float(score),
                snippet=row.chunk_text,
                topic=row.topic,
                lang=_snippet_lang(row.lang),
            )
        )
    return scored


def _pgvector_search(db: Session, params: SearchParams, cfg: CareConfig, query_vec: list[float]) -> list[KnowledgeSnippet]:
    binds: dict[str, Any] = {
        "q": "[" + ",".join(f"{float(x):.8f}" for x in query_vec) + "]",
        "lang": params.lang,
        "min_score": cfg.knowledge_min_score,
        "k": params.top_k,
    }
    topic_clause = ""
    if params.topic:
        topic_clause = "AND c.topic = :topic"
        binds["topic"] = params.topic
    rows = db.execute(
        text(
            f"""
            SELECT
              c.id,
              c.chunk_text,
              c.topic,
              c.lang,
              (1 - (c.embedding <=> :q)) AS score
            FROM care_knowledge c
            WHERE c.lang = :lang AND c.embedding IS NOT NULL {topic_clause}
              AND (1 - (c.embedding <=> :q)) >= :min_score
            ORDER BY c.embedding <=> :q
            LIMIT :k
            """
        ),
        binds,
    ).fetchall()
    return [
        KnowledgeSnippet(
            id=str(row[0]),
            score=float(row[4] or 0.0),
            snippet=row[1],
            topic=row[2],
            lang=_snippet_lang(row[3]),
        )
        for row in rows
    ]


def _remote_score(item: dict[str, Any]) -> float:
    if isinstance(item.get("similarity"), (int, float)):
        return float(item["similarity"])
    # pgvector cosine distance: 0 is identical.
    if isinstance(item.get("distance"), (int, float)):
        return 1.0 - float(item["distance"])
    return 0.0


async def _remote_search(params: SearchParams, cfg: CareConfig) -> list[KnowledgeSnippet]:
    if not cfg.functions_url:
        raise KnowledgeSearchError(None, "functions_url is not configured")
    headers = {"Content-Type": "application/json"}
    if cfg.functions_key:
        headers["Authorization"] = f"Bearer {cfg.functions_key}"
        headers["apikey"] = cfg.functions_key
    async with httpx.AsyncClient(timeout=cfg.knowledge_timeout_s) as client:
        res = await client.post(
            f"{cfg.functions_url}/knowledge-search",
            headers=headers,
            json={
                "query": params.query,
                "lang": params.lang,
                "topic": params.topic,
                "topK": params.top_k,
            },
        )
    if res.status_code >= 400:
        raise KnowledgeSearchError(res.status_code, res.text[:200])
    payload = res.json()
    results = payload.get("results") if isinstance(payload, dict) else None
    out: list[KnowledgeSnippet] = []
    for item in results or []:
        if not isinstance(item, dict):
            continue
        text = str(item.get("chunk_text") or item.get("snippet") or "").strip()
        if not text:
            continue
        out.append(
            KnowledgeSnippet(
                id=str(item.get("id") or ""),
                score=_remote_score(item),
                snippet=text,
                topic=item.get("topic"),
                lang=_snippet_lang(item.get("lang")),
            )
        )
    return out


async def _run_backend(params: SearchParams, cfg: CareConfig, db: Session | None) -> list[KnowledgeSnippet]:
    if cfg.knowledge_backend == "remote":
        return await _remote_search(params, cfg)
    if db is not None:
        return await _local_search(db, params, cfg)
    own = SessionLocal()
    try:
        return await _local_search(own, params, cfg)
    finally:
        own.close()


async def search_knowledge(params: SearchParams, *, db: Session | None = None) -> list[KnowledgeSnippet]:
    """
    Semantic search over the care knowledge base.

    Never raises: a failing, slow or unconfigured backend yields an empty list, which callers
    treat exactly like "no results". At most ``params.top_k`` snippets, best first.
    """
    cfg = get_care_config()
    if cfg.knowledge_backend == "none" or params.top_k <= 0 or not (params.query or "").strip():
        return []
    try:
        results = await asyncio.wait_for(_run_backend(params, cfg, db), timeout=cfg.knowledge_timeout_s)
    except asyncio.TimeoutError:
        _logger.warning("knowledge-search timed out after %.1fs, falling back to empty", cfg.knowledge_timeout_s)
        return []
    except Exception as exc:
        _logger.warning("knowledge-search failed, falling back to empty: %s", exc)
        return []
    ranked = sorted(results, key=lambda s: s.score, reverse=True)
    return ranked[: params.top_k]


async def add_knowledge(db: Session, rows: list[dict[str, Any]]) -> int:
    """Insert chunk rows (``topic``, ``lang``, ``title``, ``chunk_text`` and optional ``embedding``)."""
    if not rows:
        return 0
    missing = [r for r in rows if r.get("embedding") is None]
    if missing:
        vectors = await get_embeddings_provider().embed([r["chunk_text"] for r in missing])
        for row, vec in zip(missing, vectors):
            row["embedding"] = vec
    for row in rows:
        db.add(
            models.CareKnowledge(
                topic=row.get("topic") or "general",
                lang=row.get("lang") or "en",
                title=row.get("title") or "untitled",
                chunk_text=row["chunk_text"],
                embedding=row["embedding"],
                source_url=row.get("source_url"),
            )
        )
    db.commit()
    return len(rows)
