from __future__ import annotations

from typing import Protocol


class EmbeddingsProvider(Protocol):
    name: str
    dimensions: int

    async def embed(self, texts: list[str]) -> list[list[float]]: ...
