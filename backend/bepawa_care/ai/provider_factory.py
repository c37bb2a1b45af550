from __future__ import annotations

import os
from functools import lru_cache

from bepawa_care.ai.providers.base import EmbeddingsProvider
from bepawa_care.ai.providers.openai import OpenAIEmbeddingsProvider
from bepawa_care.ai.providers.stub import StubProvider


@lru_cache(maxsize=1)
def get_embeddings_provider() -> EmbeddingsProvider:
    provider_name = (os.getenv("EMBEDDINGS_PROVIDER") or "openai").strip().lower()
    if provider_name in {"stub", "none"}:
        return StubProvider()
    if provider_name == "openai":
        return OpenAIEmbeddingsProvider()
    raise RuntimeError(f"Unsupported EMBEDDINGS_PROVIDER: {provider_name}")
