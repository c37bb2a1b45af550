"""Care message routing: safety -> topic pack -> retrieval -> fallback.

States run strictly in that order. Each either answers (terminal) or falls through; no state
is retried. Adapter failures count as "no answer", so ``route`` always returns a response.
"""

from __future__ import annotations

import logging
import re
from typing import Awaitable, Callable

from bepawa_care.ai import knowledge, toolkit, translate as translation
from bepawa_care.ai.safety import is_crisis, safety_response
from bepawa_care.ai.topics import detect_topic, packs_faq, topic_suggestions
from bepawa_care.ai.types import (
    KnowledgeSnippet,
    Lang,
    Message,
    OrchestratorResponse,
    SearchParams,
    TranslateOptions,
)
from bepawa_care.content.packs import CARE_TOPICS, TopicPack


_logger = logging.getLogger(__name__)

KnowledgeSearch = Callable[[SearchParams], Awaitable[list[KnowledgeSnippet]]]
Translator = Callable[[str, TranslateOptions], Awaitable[str]]

RAG_TOP_K = 3

# Known heuristic: any ASCII letter counts as "possibly untranslated English".
_LATIN = re.compile(r"[A-Za-z]")

_DISCLAIMER = {
    "en": "Note: This is not a medical diagnosis. If symptoms persist, please talk to a counselor.",
    "sw": "Kumbuka: Hii si utambuzi wa kitabibu. Dalili zikiendelea, tafadhali zungumza na mshauri.",
}
_FALLBACK = {
    "en": "I might not have enough information on that yet. Can you tell me a bit more about how you're feeling?",
    "sw": "Huenda sina taarifa za kutosha kuhusu hilo kwa sasa. Unaweza kuniambia zaidi kuhusu unavyojisikia?",
}

RAG_SUGGESTIONS = ("Tell me more", "Talk to a counselor")
FALLBACK_SUGGESTIONS = ("Coping tools", "Talk to a counselor")


def _fallback(lang: Lang) -> OrchestratorResponse:
    return OrchestratorResponse(content=_FALLBACK[lang], category="general", suggestions=FALLBACK_SUGGESTIONS)


def stitch(snippets: list[KnowledgeSnippet]) -> str:
    return "\n\n".join(s.snippet.strip() for s in snippets if (s.snippet or "").strip())


def needs_translation(text: str, lang: Lang) -> bool:
    return lang == "sw" and bool(_LATIN.search(text))


async def _search(search: KnowledgeSearch, params: SearchParams) -> list[KnowledgeSnippet]:
    try:
        return list(await search(params))
    except Exception as exc:
        _logger.warning("knowledge search raised, treating as no results: %s", exc)
        return []


async def _translate(translator: Translator, text: str, opts: TranslateOptions) -> str:
    try:
        out = await translator(text, opts)
    except Exception as exc:
        _logger.warning("translator raised, keeping original text: %s", exc)
        return text
    return out if isinstance(out, str) and out.strip() else text


async def route(
    message: Message,
    *,
    search: KnowledgeSearch | None = None,
    translator: Translator | None = None,
    topics: tuple[TopicPack, ...] = CARE_TOPICS,
) -> OrchestratorResponse:
    text = message.text or ""
    lang: Lang = "sw" if message.lang == "sw" else "en"

    if is_crisis(text):
        _logger.debug("care route stage=safety")
        return safety_response(lang)

    topic = detect_topic(text, topics)
    if topic:
        content = packs_faq(topic, lang, topics)
        if content:
            _logger.debug("care route stage=topic_pack topic=%s", topic)
            return OrchestratorResponse(
                content=content,
                category="general",
                suggestions=topic_suggestions(topic, topics),
            )

    if text.strip():
        snippets = await _search(
            search or knowledge.search_knowledge,
            SearchParams(query=text, lang=lang, topic=topic, top_k=RAG_TOP_K),
        )
        stitched = stitch(snippets[:RAG_TOP_K])
        if stitched:
            if needs_translation(stitched, lang):
                stitched = await _translate(
                    translator or translation.translate,
                    stitched,
                    TranslateOptions(target="sw", source="en", hint="therapy", safe=True),
                )
            _logger.debug("care route stage=rag snippets=%d", len(snippets))
            return OrchestratorResponse(
                content=f"{stitched}\n\n{_DISCLAIMER[lang]}",
                category="education",
                suggestions=RAG_SUGGESTIONS,
            )

    _logger.debug("care route stage=fallback")
    return _fallback(lang)


async def respond(
    message: Message,
    *,
    search: KnowledgeSearch | None = None,
    translator: Translator | None = None,
) -> OrchestratorResponse:
    """Channel entry point: toolkit quick replies first, but never ahead of a crisis check."""
    lang: Lang = "sw" if message.lang == "sw" else "en"
    if not is_crisis(message.text):
        quick = toolkit.resolve_quick_reply(message.text, lang)
        if quick is not None:
            return quick
    return await route(message, search=search, translator=translator)
