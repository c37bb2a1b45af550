from __future__ import annotations

from bepawa_care.ai.types import Lang, OrchestratorResponse
from bepawa_care.config.care import get_care_config


# Lowercase phrases in both languages; any substring hit triggers the safety path.
CRISIS_LEXICON: frozenset[str] = frozenset(
    {
        "suicide",
        "suicidal",
        "kill myself",
        "end my life",
        "want to die",
        "self harm",
        "self-harm",
        "hurt myself",
        "kujiua",
        "nimechoka kuishi",
        "najiumiza",
        "najidhuru",
        "nataka kufa",
    }
)

SAFETY_SUGGESTIONS: tuple[str, ...] = ("Grounding exercise", "Talk to a counselor")


def is_crisis(text: str | None, lexicon: frozenset[str] = CRISIS_LEXICON) -> bool:
    msg = (text or "").lower()
    if not msg:
        return False
    return any(phrase in msg for phrase in lexicon)


def safety_message(lang: Lang) -> str:
    cfg = get_care_config()
    if lang == "sw":
        return (
            "Samahani sana kwa unachopitia. Hauko peke yako, na usalama wako ni muhimu. "
            f"Ikiwa uko hatarini sasa hivi, tafadhali piga namba ya dharura {cfg.emergency_number} "
            "au wasiliana na mtu unayemwamini mara moja. "
            f"Unaweza pia kuzungumza na mshauri kupitia WhatsApp: {cfg.counselor_whatsapp_url}"
        )
    return (
        "I'm really sorry you're going through this. You are not alone, and your safety matters. "
        f"If you are in immediate danger, please call the emergency number {cfg.emergency_number} "
        "or reach someone you trust right now. "
        f"You can also talk to a counselor on WhatsApp: {cfg.counselor_whatsapp_url}"
    )


def safety_response(lang: Lang) -> OrchestratorResponse:
    return OrchestratorResponse(
        content=safety_message(lang),
        category="safety",
        suggestions=SAFETY_SUGGESTIONS,
    )
