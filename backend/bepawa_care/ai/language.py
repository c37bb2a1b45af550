from __future__ import annotations

import re

from bepawa_care.ai.types import Lang


_SWAHILI_MARKERS = {
    "asante",
    "fedha",
    "habari",
    "hujambo",
    "huzuni",
    "je",
    "karibu",
    "kujifungua",
    "mapenzi",
    "mimi",
    "msiba",
    "msongo",
    "nina",
    "sana",
    "samahani",
    "sina",
    "sisi",
    "tafadhali",
    "uhusiano",
    "wao",
    "wasiwasi",
    "wewe",
}
# Common Swahili verb prefixes ("nime-", "sija-") seen in short chat messages.
_SWAHILI_PREFIXES = ("nime", "sija", "naji", "nataka")


def detect_language(text: str | None) -> Lang:
    tokens = re.findall(r"[a-z]+", (text or "").lower())
    if any(t in _SWAHILI_MARKERS for t in tokens):
        return "sw"
    if any(t.startswith(_SWAHILI_PREFIXES) and len(t) > 5 for t in tokens):
        return "sw"
    return "en"


def resolve_language(requested: str | None, text: str | None) -> Lang:
    value = (requested or "auto").strip().lower()
    if value in {"en", "sw"}:
        return value  # type: ignore[return-value]
    return detect_language(text)
