from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

from sqlalchemy.types import TEXT, TypeDecorator, UserDefinedType


Lang = Literal["en", "sw"]
Category = Literal["general", "safety", "education"]


@dataclass(frozen=True)
class Message:
    text: str
    lang: Lang = "en"


@dataclass(frozen=True)
class OrchestratorResponse:
    content: str
    category: Category = "general"
    suggestions: tuple[str, ...] = ()
    type: Literal["bot"] = "bot"

    def __post_init__(self) -> None:
        if len(self.suggestions) > 3:
            raise ValueError("at most 3 suggestions are allowed")


@dataclass(frozen=True)
class KnowledgeSnippet:
    id: str
    score: float
    snippet: str
    topic: str | None = None
    lang: Lang | None = None


@dataclass(frozen=True)
class SearchParams:
    query: str
    lang: Lang
    topic: str | None = None
    top_k: int = 3


@dataclass(frozen=True)
class TranslateOptions:
    target: Lang
    source: Lang | None = None  # provider auto-detects when omitted
    hint: str | None = None  # domain hint, e.g. "therapy"
    safe: bool = False


class _Vector(UserDefinedType):
    cache_ok = True

    def __init__(self, dimensions: int):
        self.dimensions = dimensions

    def get_col_spec(self, **_: Any) -> str:
        return f"vector({self.dimensions})"


class Embedding(TypeDecorator):
    """
    Embedding column for knowledge chunks.

    Postgres stores a pgvector `vector(dim)`; every other dialect keeps a JSON list in TEXT.
    """

    cache_ok = True
    impl = TEXT

    def __init__(self, dimensions: int):
        super().__init__()
        self.dimensions = dimensions

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(_Vector(self.dimensions))
        return dialect.type_descriptor(TEXT())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "postgresql":
            return "[" + ",".join(f"{float(x):.8f}" for x in value) + "]"
        return json.dumps([float(x) for x in value])

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return [float(x) for x in value]
        if isinstance(value, str) and value.startswith("[") and value.endswith("]"):
            inner = value[1:-1].strip()
            if not inner:
                return []
            return [float(x) for x in inner.split(",")]
        return None
