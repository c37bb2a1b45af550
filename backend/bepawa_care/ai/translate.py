"""EN <-> SW translation with pluggable providers.

``translate`` is best-effort: any provider failure returns the input unchanged, so callers
never need to guard it. ``translate_sync`` is the identity for code paths that cannot await.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from dataclasses import dataclass

import httpx

from bepawa_care.ai.types import TranslateOptions
from bepawa_care.config.care import CareConfig, get_care_config


_logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\u0000-\u001f\u007f]+")
_WHITESPACE = re.compile(r"\s+")

_GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"


@dataclass(frozen=True)
class TranslationError(RuntimeError):
    status_code: int | None
    message: str

    def __str__(self) -> str:  # pragma: no cover
        prefix = f"translation error ({self.status_code})" if self.status_code is not None else "translation error"
        return f"{prefix}: {self.message}"


def safety_scrub(text: str) -> str:
    return _WHITESPACE.sub(" ", _CONTROL_CHARS.sub(" ", text or "")).strip()


def translate_sync(text: str, _opts: TranslateOptions) -> str:
    return text


async def _remote_translate(text: str, opts: TranslateOptions, cfg: CareConfig) -> str:
    if not cfg.functions_url:
        raise TranslationError(None, "functions_url is not configured")
    headers = {"Content-Type": "application/json"}
    if cfg.functions_key:
        headers["Authorization"] = f"Bearer {cfg.functions_key}"
        headers["apikey"] = cfg.functions_key
    async with httpx.AsyncClient(timeout=cfg.translate_timeout_s) as client:
        res = await client.post(
            f"{cfg.functions_url}/translate",
            headers=headers,
            json={"q": text, "target": opts.target, "source": opts.source},
        )
    if res.status_code >= 400:
        raise TranslationError(res.status_code, res.text[:200])
    data = res.json()
    translated = data.get("translated") if isinstance(data, dict) else None
    if not isinstance(translated, str):
        raise TranslationError(res.status_code, "response has no translated text")
    return translated


async def _google_translate(text: str, opts: TranslateOptions, cfg: CareConfig) -> str:
    api_key = (os.getenv("GOOGLE_TRANSLATE_API_KEY") or "").strip()
    if not api_key:
        raise TranslationError(None, "GOOGLE_TRANSLATE_API_KEY is not set")
    body = {"q": text, "target": opts.target, "format": "text"}
    if opts.source:
        body["source"] = opts.source
    async with httpx.AsyncClient(timeout=cfg.translate_timeout_s) as client:
        res = await client.post(_GOOGLE_TRANSLATE_URL, params={"key": api_key}, json=body)
    if res.status_code >= 400:
        raise TranslationError(res.status_code, res.text[:200])
    try:
        return str(res.json()["data"]["translations"][0]["translatedText"])
    except (KeyError, IndexError, TypeError) as exc:
        raise TranslationError(res.status_code, "unexpected response shape") from exc


async def _provider_translate(text: str, opts: TranslateOptions) -> str:
    cfg = get_care_config()
    if cfg.translate_backend == "remote":
        return await _remote_translate(text, opts, cfg)
    if cfg.translate_backend == "google":
        return await _google_translate(text, opts, cfg)
    return text


async def translate(text: str, opts: TranslateOptions) -> str:
    cfg = get_care_config()
    # `none` is the identity: no scrub either, so stitched paragraph breaks survive.
    if cfg.translate_backend == "none":
        return text
    if not (text or "").strip() or (opts.source is not None and opts.source == opts.target):
        return text
    timeout = cfg.translate_timeout_s
    try:
        out = await asyncio.wait_for(_provider_translate(text, opts), timeout=timeout)
    except asyncio.TimeoutError:
        _logger.warning("translation timed out after %.1fs, returning original text", timeout)
        return text
    except Exception as exc:
        _logger.warning("translation failed, returning original text: %s", exc)
        return text
    return safety_scrub(out) if opts.safe else out
