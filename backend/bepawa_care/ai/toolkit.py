from __future__ import annotations

import re

from bepawa_care.ai.types import Lang, OrchestratorResponse
from bepawa_care.config.care import get_care_config
from bepawa_care.content.packs import CARE_TOPICS, EXERCISES, MOOD_TOPICS, SCREENINGS, TopicPack


_SCREENING_REPLY = re.compile(r"^\s*(phq2|gad2)\s*:\s*([0-3])\s*,\s*([0-3])\s*$", re.IGNORECASE)
_QUICK_CHECK = re.compile(r"^\s*quick check(?:\s*\((?P<name>[^)]+)\))?\s*$", re.IGNORECASE)

_DISCLAIMER = {
    "en": "Note: This is not a diagnosis. Your wellbeing matters.",
    "sw": "Kumbuka: Huu si utambuzi wa kitabibu. Ustawi wako ni muhimu.",
}
_BANDS = {
    "en": (
        "Low risk. Keep healthy routines and check in with yourself.",
        "Possible concern. Try coping tools and consider a counselor if it persists.",
        "Significant concern. I recommend talking to a licensed counselor.",
    ),
    "sw": (
        "Hatari ndogo. Endelea na mazoea mazuri na jitathmini mara kwa mara.",
        "Huenda kuna tatizo. Jaribu mbinu za kukabiliana na fikiria mshauri ikiendelea.",
        "Tatizo kubwa. Nashauri uzungumze na mshauri mwenye leseni.",
    ),
}


def screening_code_for_topic(topic_id: str | None) -> str:
    return "PHQ2" if topic_id in MOOD_TOPICS else "GAD2"


def screening_prompt(code: str, lang: Lang) -> OrchestratorResponse:
    screening = SCREENINGS[code.upper()]
    questions = screening.questions_sw if lang == "sw" else screening.questions_en
    if lang == "sw":
        content = (
            f"Tufanye tathmini fupi ({screening.code}). Jibu kwa namba mbili 0-3 (mfano: \"{screening.code}: 1,2\").\n\n"
            f"1) {questions[0]}\n2) {questions[1]}\n\n"
            "0=Hapana kabisa, 1=Siku chache, 2=Zaidi ya nusu ya siku, 3=Karibu kila siku"
        )
    else:
        content = (
            f"Let's do a quick check ({screening.code}). Answer with two numbers 0-3 (e.g., \"{screening.code}: 1,2\").\n\n"
            f"1) {questions[0]}\n2) {questions[1]}\n\n"
            "0=Not at all, 1=Several days, 2=More than half the days, 3=Nearly every day"
        )
    return OrchestratorResponse(
        content=content,
        category="general",
        suggestions=(f"{screening.code}: 0,1", "Coping tools", "Talk to a counselor"),
    )


def parse_screening_reply(text: str | None) -> tuple[str, list[int]] | None:
    match = _SCREENING_REPLY.match(text or "")
    if not match:
        return None
    return match.group(1).upper(), [int(match.group(2)), int(match.group(3))]


def score_screening(code: str, values: list[int], lang: Lang) -> OrchestratorResponse:
    code = code.upper()
    if code not in SCREENINGS:
        raise ValueError(f"Unknown screening: {code}")
    if len(values) != 2 or any(v < 0 or v > 3 for v in values):
        raise ValueError("Screenings take exactly two answers between 0 and 3")
    total = sum(values)
    low, possible, significant = _BANDS[lang]
    if total <= 2:
        advice = low
    elif total <= 4:
        advice = possible
    else:
        advice = significant
    label = "jumla" if lang == "sw" else "total"
    return OrchestratorResponse(
        content=f"{code} {label}: {total}. {advice}\n\n{_DISCLAIMER[lang]}",
        category="general",
        suggestions=("Coping tools", "Talk to a counselor", "Breathing exercise"),
    )


def exercise_response(exercise_id: str, lang: Lang) -> OrchestratorResponse:
    exercise = EXERCISES[exercise_id]
    title = exercise.title_sw if lang == "sw" else exercise.title_en
    steps = exercise.steps_sw if lang == "sw" else exercise.steps_en
    outro = "Nenda taratibu. Zingatia kila hatua." if lang == "sw" else "Go slowly. Notice the details."
    body = "\n".join(f"• {step}" for step in steps)
    return OrchestratorResponse(
        content=f"{title}\n\n{body}\n\n{outro}",
        category="general",
        suggestions=("More coping tools", "Talk to a counselor"),
    )


def coping_tools(lang: Lang) -> OrchestratorResponse:
    header = "Mbinu za kukabiliana unazoweza kujaribu sasa:" if lang == "sw" else "Coping tools you can try right now:"
    titles = [(e.title_sw if lang == "sw" else e.title_en) for e in EXERCISES.values()]
    return OrchestratorResponse(
        content=header + "\n" + "\n".join(f"• {t}" for t in titles),
        category="general",
        suggestions=("Breathing exercise", "Grounding exercise", "Talk to a counselor"),
    )


def counselor_links(lang: Lang) -> OrchestratorResponse:
    link = get_care_config().counselor_whatsapp_url
    if lang == "sw":
        content = (
            "Nashauri uunganishwe na mshauri wa kitaalamu kwa msaada zaidi. Unaweza kuzungumza kupitia WhatsApp "
            "au kuweka miadi ya siri (chat/video).\n\n"
            f"• WhatsApp: {link}\n• Weka miadi: /appointments"
        )
    else:
        content = (
            "I recommend connecting with a licensed counselor for more support. You can use WhatsApp "
            "or book a confidential session (chat/video).\n\n"
            f"• WhatsApp: {link}\n• Book session: /appointments"
        )
    return OrchestratorResponse(
        content=content,
        category="general",
        suggestions=("Breathing exercise", "Grounding exercise"),
    )


def _topic_by_name(name: str, topics: tuple[TopicPack, ...] = CARE_TOPICS) -> TopicPack | None:
    needle = name.strip().lower()
    return next((t for t in topics if t.name.lower() == needle or t.id == needle), None)


_EXACT_REPLIES = {
    "breathing exercise": lambda lang: exercise_response("box_breathing", lang),
    "grounding exercise": lambda lang: exercise_response("grounding_54321", lang),
    "coping tools": coping_tools,
    "more coping tools": coping_tools,
    "coping strategies": coping_tools,
    "talk to a counselor": counselor_links,
    "book a counselor": counselor_links,
}


def resolve_quick_reply(text: str | None, lang: Lang) -> OrchestratorResponse | None:
    """Map suggestion labels and screening answers back to toolkit responses."""
    cleaned = (text or "").strip()
    if not cleaned:
        return None
    handler = _EXACT_REPLIES.get(cleaned.lower())
    if handler is not None:
        return handler(lang)
    parsed = parse_screening_reply(cleaned)
    if parsed is not None:
        return score_screening(parsed[0], parsed[1], lang)
    quick = _QUICK_CHECK.match(cleaned)
    if quick:
        topic = _topic_by_name(quick.group("name") or "")
        return screening_prompt(screening_code_for_topic(topic.id if topic else None), lang)
    return None
