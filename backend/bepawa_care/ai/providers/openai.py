from __future__ import annotations

import os

import httpx

from .base import EmbeddingsProvider


class OpenAIEmbeddingsProvider(EmbeddingsProvider):
    name = "openai"

    def __init__(self) -> None:
        self.api_key = (os.getenv("OPENAI_API_KEY") or "").strip()
        self.base_url = (os.getenv("OPENAI_BASE_URL") or "https://api.openai.com/v1").rstrip("/")
        self.model = os.getenv("OPENAI_EMBED_MODEL", "text-embedding-3-small")
        self.dimensions = int(os.getenv("OPENAI_EMBED_DIM", "1536"))
        self.timeout_s = float(os.getenv("OPENAI_TIMEOUT_S", "10"))

        if not self.api_key:
            raise RuntimeError("OPENAI_API_KEY is required when EMBEDDINGS_PROVIDER=openai")

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )

    @staticmethod
    def _raise_openai_error(res: httpx.Response) -> None:
        try:
            payload = res.json()
            message = payload.get("error", {}).get("message") or payload.get("message") or res.text
        except ValueError:
            message = res.text
        raise RuntimeError(f"OpenAI API error ({res.status_code}): {message}")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        res = await self._client.post("/embeddings", json={"model": self.model, "input": texts})
        if res.status_code >= 400:
            self._raise_openai_error(res)
        data = res.json()
        return [item["embedding"] for item in data["data"]]
