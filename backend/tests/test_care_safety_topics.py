import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
if str(BASE_DIR) not in sys.path:
    sys.path.append(str(BASE_DIR))

from bepawa_care.ai.safety import SAFETY_SUGGESTIONS, is_crisis, safety_message, safety_response
from bepawa_care.ai.topics import detect_topic, packs_faq, topic_suggestions
from bepawa_care.config.care import get_care_config
from bepawa_care.content.packs import CARE_TOPICS, FAQItem, TopicPack, validate_topics


@pytest.fixture(autouse=True)
def fresh_config():
    get_care_config.cache_clear()
    yield
    get_care_config.cache_clear()


@pytest.mark.parametrize(
    "text",
    [
        "I want to kill myself",
        "sometimes I think about SUICIDE",
        "I keep wanting to self-harm",
        "nimechoka kuishi kabisa",
        "nataka kufa",
    ],
)
def test_crisis_phrases_detected_in_both_languages(text: str):
    assert is_crisis(text) is True


@pytest.mark.parametrize("text", ["", None, "I had a long day at work", "killing time before class"])
def test_non_crisis_text(text):
    assert is_crisis(text) is False


def test_safety_message_is_localized_and_carries_contacts():
    cfg = get_care_config()
    en = safety_message("en")
    sw = safety_message("sw")
    assert en != sw
    for msg in (en, sw):
        assert cfg.emergency_number in msg
        assert cfg.counselor_whatsapp_url in msg
    assert "You are not alone" in en
    assert "Hauko peke yako" in sw


def test_safety_message_uses_configured_emergency_number(monkeypatch):
    monkeypatch.setenv("CARE_EMERGENCY_NUMBER", "116")
    get_care_config.cache_clear()
    assert "116" in safety_message("en")


def test_safety_response_shape():
    res = safety_response("sw")
    assert res.category == "safety"
    assert res.type == "bot"
    assert res.suggestions == SAFETY_SUGGESTIONS


def test_detect_topic_first_match_in_declaration_order():
    # "stress" is declared before "financial_stress" ("money").
    assert detect_topic("stress about money") == "stress"
    assert detect_topic("I can't pay my rent") == "financial_stress"
    assert detect_topic("My PARTNER ignores me") == "relationships"
    assert detect_topic("nina msongo") == "stress"


def test_detect_topic_no_match():
    assert detect_topic("tell me about mindfulness") is None
    assert detect_topic("") is None
    assert detect_topic(None) is None


def test_packs_faq_formats_first_three_entries():
    content = packs_faq("relationships", "en")
    assert content is not None
    lines = content.split("\n")
    assert lines[0] == "Here are a few common questions on Relationships:"
    assert content.count("• ") <= 3
    topic = next(t for t in CARE_TOPICS if t.id == "relationships")
    first = topic.faqs_en[0]
    assert f"• {first.question}\n  {first.answer}" in content


def test_packs_faq_swahili_header():
    content = packs_faq("sleep", "sw")
    assert content is not None
    assert content.startswith("Maswali ya kawaida kuhusu Sleep:")


def test_packs_faq_caps_at_three():
    faqs = tuple(FAQItem(f"Q{i}?", f"A{i}.") for i in range(5))
    topics = (TopicPack(id="demo", name="Demo", labels=("demo",), faqs_en=faqs),)
    content = packs_faq("demo", "en", topics)
    assert content is not None
    assert "Q2?" in content
    assert "Q3?" not in content


def test_packs_faq_empty_list_or_unknown_topic_returns_none():
    topics = (TopicPack(id="demo", name="Demo", labels=("demo",), faqs_en=(FAQItem("Q?", "A."),)),)
    assert packs_faq("demo", "sw", topics) is None
    assert packs_faq("missing", "en") is None


def test_topic_suggestions_are_bounded():
    suggestions = topic_suggestions("anxiety")
    assert suggestions == ("Coping tools", "Quick check (Anxiety)", "Talk to a counselor")


def test_validate_topics_rejects_bad_packs():
    with pytest.raises(ValueError):
        validate_topics((TopicPack(id="a", name="A", labels=("x",)), TopicPack(id="a", name="B", labels=("y",))))
    with pytest.raises(ValueError):
        validate_topics((TopicPack(id="a", name="A", labels=("Upper",)),))
