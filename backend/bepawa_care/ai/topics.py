from __future__ import annotations

from bepawa_care.ai.types import Lang
from bepawa_care.content.packs import CARE_TOPICS, TopicPack, get_topic


FAQ_LIMIT = 3


def detect_topic(text: str | None, topics: tuple[TopicPack, ...] = CARE_TOPICS) -> str | None:
    """Return the id of the first topic (declaration order) with a label inside ``text``."""
    lower = (text or "").lower()
    if not lower:
        return None
    for topic in topics:
        if any(label in lower for label in topic.labels):
            return topic.id
    return None


def _faq_header(name: str, lang: Lang) -> str:
    if lang == "sw":
        return f"Maswali ya kawaida kuhusu {name}:"
    return f"Here are a few common questions on {name}:"


def packs_faq(topic_id: str, lang: Lang, topics: tuple[TopicPack, ...] = CARE_TOPICS) -> str | None:
    topic = get_topic(topic_id, topics)
    if topic is None:
        return None
    faqs = topic.faqs(lang)[:FAQ_LIMIT]
    if not faqs:
        return None
    lines = [_faq_header(topic.name, lang)]
    lines.extend(f"• {item.question}\n  {item.answer}" for item in faqs)
    return "\n".join(lines)


def topic_suggestions(topic_id: str, topics: tuple[TopicPack, ...] = CARE_TOPICS) -> tuple[str, ...]:
    topic = get_topic(topic_id, topics)
    name = topic.name if topic else "Topic"
    return ("Coping tools", f"Quick check ({name})", "Talk to a counselor")
