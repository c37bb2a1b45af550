from __future__ import annotations

import hashlib
import math

from .base import EmbeddingsProvider


class StubProvider(EmbeddingsProvider):
    """
    Deterministic embeddings for tests/dev when no embeddings API is configured.
    """

    name = "stub"
    dimensions = 16

    async def embed(self, texts: list[str]) -> list[list[float]]:
        out: list[list[float]] = []
        for text in texts:
            digest = hashlib.sha256((text or "").strip().lower().encode("utf-8")).digest()
            out.append([b / 255.0 for b in digest[: self.dimensions]])
        return out


def cosine_similarity(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a)) or 1.0
    norm_b = math.sqrt(sum(y * y for y in b)) or 1.0
    return dot / (norm_a * norm_b)
