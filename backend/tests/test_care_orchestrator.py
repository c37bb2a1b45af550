import asyncio
import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))

from bepawa_care.ai.orchestrator import (
    FALLBACK_SUGGESTIONS,
    RAG_SUGGESTIONS,
    needs_translation,
    respond,
    route,
    stitch,
)
from bepawa_care.ai.types import KnowledgeSnippet, Message, OrchestratorResponse, TranslateOptions
from bepawa_care.config.care import get_care_config
from bepawa_care.content.packs import FAQItem, TopicPack


@pytest.fixture(autouse=True)
def fresh_config():
    get_care_config.cache_clear()
    yield
    get_care_config.cache_clear()


class RecordingSearch:
    def __init__(self, results=None, exc: Exception | None = None):
        self.results = results or []
        self.exc = exc
        self.calls = []

    async def __call__(self, params):
        self.calls.append(params)
        if self.exc is not None:
            raise self.exc
        return list(self.results)


class RecordingTranslator:
    def __init__(self, output: str | None = None, exc: Exception | None = None):
        self.output = output
        self.exc = exc
        self.calls = []

    async def __call__(self, text: str, opts: TranslateOptions) -> str:
        self.calls.append((text, opts))
        if self.exc is not None:
            raise self.exc
        return self.output if self.output is not None else text


def _snip(i: int, text: str, score: float = 0.9) -> KnowledgeSnippet:
    return KnowledgeSnippet(id=str(i), score=score, snippet=text)


def _run(message: Message, **kwargs) -> OrchestratorResponse:
    return asyncio.run(route(message, **kwargs))


def test_crisis_takes_precedence_over_topic_and_retrieval():
    search = RecordingSearch([_snip(1, "Some helpful text")])
    res = _run(Message("I want to kill myself but also have anxiety", "en"), search=search)
    assert res.category == "safety"
    assert search.calls == []


def test_crisis_in_swahili_returns_swahili_safety_message():
    res = _run(Message("nataka kufa", "sw"), search=RecordingSearch())
    assert res.category == "safety"
    assert "Hauko peke yako" in res.content


@pytest.mark.parametrize("lang", ["en", "sw"])
def test_empty_text_returns_fallback_without_search(lang):
    search = RecordingSearch([_snip(1, "never used")])
    res = _run(Message("", lang), search=search)
    assert res.category == "general"
    assert res.suggestions == FALLBACK_SUGGESTIONS
    assert search.calls == []


def test_topic_pack_short_circuits_retrieval():
    search = RecordingSearch([_snip(1, "Some helpful text")])
    res = _run(Message("My partner and I keep fighting", "en"), search=search)
    assert res.category == "general"
    assert "Here are a few common questions on Relationships:" in res.content
    assert search.calls == []


def test_topic_with_no_faqs_in_language_falls_through_with_topic_hint():
    topics = (TopicPack(id="demo", name="Demo", labels=("demo",), faqs_en=(FAQItem("Q?", "A."),)),)
    search = RecordingSearch([_snip(1, "Maelezo ya demo")])
    res = _run(Message("demo tafadhali", "sw"), search=search, translator=RecordingTranslator(), topics=topics)
    assert res.category == "education"
    assert len(search.calls) == 1
    params = search.calls[0]
    assert params.topic == "demo"
    assert params.lang == "sw"
    assert params.top_k == 3


def test_retrieval_without_topic_sends_no_topic():
    search = RecordingSearch()
    _run(Message("tell me about mindfulness", "en"), search=search)
    assert len(search.calls) == 1
    assert search.calls[0].topic is None
    assert search.calls[0].query == "tell me about mindfulness"


def test_rag_answer_stitches_snippets_and_adds_disclaimer():
    search = RecordingSearch([_snip(1, "First idea."), _snip(2, "Second idea.")])
    translator = RecordingTranslator()
    res = _run(Message("tell me about mindfulness", "en"), search=search, translator=translator)
    assert res.category == "education"
    assert res.suggestions == RAG_SUGGESTIONS
    assert res.content.startswith("First idea.\n\nSecond idea.\n\n")
    assert "not a medical diagnosis" in res.content
    assert translator.calls == []


def test_rag_uses_at_most_three_snippets():
    search = RecordingSearch([_snip(i, f"Idea {i}.") for i in range(5)])
    res = _run(Message("tell me about mindfulness", "en"), search=search)
    assert "Idea 2." in res.content
    assert "Idea 3." not in res.content


def test_rag_translates_english_snippets_for_swahili():
    search = RecordingSearch([_snip(1, "Breathe slowly.")])
    translator = RecordingTranslator(output="Pumua taratibu.")
    res = _run(Message("nieleze kuhusu utulivu", "sw"), search=search, translator=translator)
    assert res.category == "education"
    assert res.content.startswith("Pumua taratibu.")
    assert "Hii si utambuzi wa kitabibu" in res.content
    assert len(translator.calls) == 1
    text, opts = translator.calls[0]
    assert text == "Breathe slowly."
    assert opts == TranslateOptions(target="sw", source="en", hint="therapy", safe=True)


def test_translator_failure_keeps_stitched_text():
    search = RecordingSearch([_snip(1, "Breathe slowly.")])
    res = _run(
        Message("nieleze kuhusu utulivu", "sw"),
        search=search,
        translator=RecordingTranslator(exc=RuntimeError("provider down")),
    )
    assert res.category == "education"
    assert res.content.startswith("Breathe slowly.")


def test_translator_blank_output_keeps_stitched_text():
    search = RecordingSearch([_snip(1, "Breathe slowly.")])
    res = _run(Message("nieleze kuhusu utulivu", "sw"), search=search, translator=RecordingTranslator(output="  "))
    assert res.content.startswith("Breathe slowly.")


def test_swahili_answer_keeps_paragraphs_without_translate_backend(monkeypatch):
    monkeypatch.setenv("CARE_TRANSLATE_BACKEND", "none")
    get_care_config.cache_clear()
    search = RecordingSearch([_snip(1, "Pumzika kidogo."), _snip(2, "Kunywa maji.")])
    res = _run(Message("nieleze kuhusu utulivu", "sw"), search=search)
    assert res.category == "education"
    assert res.content.startswith("Pumzika kidogo.\n\nKunywa maji.\n\nKumbuka:")


def test_empty_search_results_fall_back():
    res = _run(Message("tell me about mindfulness", "en"), search=RecordingSearch([]))
    assert res.category == "general"
    assert res.suggestions == FALLBACK_SUGGESTIONS
    assert "enough information" in res.content


def test_blank_snippets_fall_back():
    res = _run(Message("tell me about mindfulness", "en"), search=RecordingSearch([_snip(1, "   ")]))
    assert res.suggestions == FALLBACK_SUGGESTIONS


def test_search_exception_falls_back():
    res = _run(Message("tell me about mindfulness", "en"), search=RecordingSearch(exc=RuntimeError("boom")))
    assert res.category == "general"
    assert res.suggestions == FALLBACK_SUGGESTIONS


@pytest.mark.parametrize(
    "text,search",
    [
        ("I want to die", RecordingSearch()),
        ("I feel anxious", RecordingSearch()),
        ("tell me about mindfulness", RecordingSearch([_snip(i, f"Idea {i}.") for i in range(6)])),
        ("tell me about mindfulness", RecordingSearch()),
        ("", RecordingSearch()),
    ],
)
@pytest.mark.parametrize("lang", ["en", "sw"])
def test_suggestions_never_exceed_three(text, search, lang):
    res = _run(Message(text, lang), search=search, translator=RecordingTranslator())
    assert len(res.suggestions) <= 3


@pytest.mark.parametrize("text", ["I want to die", "stress", "tell me about mindfulness"])
def test_safety_pack_and_fallback_are_localized(text):
    en = _run(Message(text, "en"), search=RecordingSearch())
    sw = _run(Message(text, "sw"), search=RecordingSearch())
    assert en.category == sw.category
    assert en.content != sw.content


def test_swahili_pack_uses_swahili_header():
    res = _run(Message("stress", "sw"), search=RecordingSearch())
    assert res.content.startswith("Maswali ya kawaida kuhusu Stress:")


def test_needs_translation_heuristic():
    assert needs_translation("Breathe slowly", "sw") is True
    # Known imprecision: any Latin letter triggers, including Swahili text.
    assert needs_translation("Pumua taratibu", "sw") is True
    assert needs_translation("Breathe slowly", "en") is False
    assert needs_translation("1, 2, 3", "sw") is False


def test_stitch_skips_blank_snippets():
    assert stitch([_snip(1, " a "), _snip(2, ""), _snip(3, "b")]) == "a\n\nb"


def test_respond_resolves_quick_replies():
    search = RecordingSearch()
    res = asyncio.run(respond(Message("Coping tools", "en"), search=search))
    assert res.content.startswith("Coping tools you can try right now:")
    assert search.calls == []


def test_respond_scores_screening_reply():
    res = asyncio.run(respond(Message("PHQ2: 3,3", "en"), search=RecordingSearch()))
    assert "PHQ2 total: 6" in res.content


def test_respond_keeps_crisis_first():
    res = asyncio.run(respond(Message("I want to end my life", "en"), search=RecordingSearch()))
    assert res.category == "safety"


def test_respond_routes_everything_else():
    res = asyncio.run(respond(Message("I feel anxious", "en"), search=RecordingSearch()))
    assert "Here are a few common questions on Anxiety:" in res.content


def test_response_rejects_more_than_three_suggestions():
    with pytest.raises(ValueError):
        OrchestratorResponse(content="x", suggestions=("a", "b", "c", "d"))
