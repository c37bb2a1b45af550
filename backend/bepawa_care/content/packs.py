"""Structured, LLM-free content packs for Bepawa Care (EN/SW seed).

Everything here is loaded once at import time and treated as read-only: matchers and
responders receive these tuples by reference and never mutate them.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FAQItem:
    question: str
    answer: str


@dataclass(frozen=True)
class TopicPack:
    id: str
    name: str
    labels: tuple[str, ...]  # lowercase keyword triggers
    faqs_en: tuple[FAQItem, ...] = ()
    faqs_sw: tuple[FAQItem, ...] = ()

    def faqs(self, lang: str) -> tuple[FAQItem, ...]:
        return self.faqs_sw if lang == "sw" else self.faqs_en


@dataclass(frozen=True)
class Screening:
    code: str  # PHQ2 | GAD2
    questions_en: tuple[str, str]
    questions_sw: tuple[str, str]


@dataclass(frozen=True)
class Exercise:
    id: str
    title_en: str
    title_sw: str
    steps_en: tuple[str, ...]
    steps_sw: tuple[str, ...]


def validate_topics(topics: tuple[TopicPack, ...]) -> tuple[TopicPack, ...]:
    seen: set[str] = set()
    for topic in topics:
        if topic.id in seen:
            raise ValueError(f"Duplicate topic id: {topic.id}")
        seen.add(topic.id)
        if not topic.labels:
            raise ValueError(f"Topic {topic.id} has no labels")
        if any(label != label.lower() or not label for label in topic.labels):
            raise ValueError(f"Topic {topic.id} labels must be non-empty lowercase strings")
    return topics


# Declaration order is the match order.
CARE_TOPICS: tuple[TopicPack, ...] = validate_topics(
    (
        TopicPack(
            id="stress",
            name="Stress",
            labels=("stress", "overwhelmed", "pressure", "msongo"),
            faqs_en=(
                FAQItem(
                    "What is stress?",
                    "Stress is your body's response to pressure. Short-term stress can motivate, "
                    "but long-term stress can affect sleep and mood.",
                ),
                FAQItem(
                    "Fast ways to reduce stress?",
                    "Try 2 minutes of box breathing (4-4-4-4), a short walk, water, or write one small task you can complete.",
                ),
            ),
            faqs_sw=(
                FAQItem(
                    "Msongo ni nini?",
                    "Msongo ni mwitikio wa mwili kwa shinikizo. Wa muda mrefu unaweza kuathiri usingizi na hisia.",
                ),
            ),
        ),
        TopicPack(
            id="anxiety",
            name="Anxiety",
            labels=("anxiety", "anxious", "worry", "panic", "wasiwasi"),
            faqs_en=(
                FAQItem(
                    "What is anxiety?",
                    "Anxiety is a feeling of fear or worry. It becomes a problem when it is frequent or hard to control.",
                ),
                FAQItem(
                    "How to calm anxiety quickly?",
                    "Slow breathing, grounding 5-4-3-2-1, limit caffeine, and talk to a trusted person.",
                ),
            ),
            faqs_sw=(
                FAQItem("Wasiwasi ni nini?", "Ni hali ya hofu au wasiwasi unaoendelea. Ukizidi, tafuta msaada."),
            ),
        ),
        TopicPack(
            id="depression",
            name="Depression",
            labels=("depression", "depressed", "sad", "hopeless", "huzuni"),
            faqs_en=(
                FAQItem(
                    "Signs of depression?",
                    "Low mood, loss of interest, sleep/appetite changes, low energy, difficulty concentrating.",
                ),
                FAQItem(
                    "First steps to cope?",
                    "Small routines: sunlight, gentle movement, regular meals, short tasks, connect with someone.",
                ),
            ),
            faqs_sw=(
                FAQItem("Dalili za huzuni kali?", "Kukosa hamu, usingizi kubadilika, uchovu, mawazo hasi."),
            ),
        ),
        TopicPack(
            id="hiv_stigma",
            name="HIV Stigma",
            labels=("hiv", "stigma", "disclosure", "unyanyapaa"),
            faqs_en=(
                FAQItem(
                    "Dealing with stigma?",
                    "You deserve respect. Choose safe disclosure, connect with supportive groups, and consider counseling.",
                ),
                FAQItem("Is counseling private?", "Yes, your sessions are confidential and handled respectfully."),
            ),
            faqs_sw=(
                FAQItem(
                    "Kukabiliana na unyanyapaa?",
                    "Chagua kufichua taratibu na kwa usalama; tafuta vikundi vinavyosaidia na ushauri.",
                ),
            ),
        ),
        TopicPack(
            id="sleep",
            name="Sleep",
            labels=("insomnia", "sleep", "night", "kulala", "usingizi"),
            faqs_en=(
                FAQItem(
                    "Improve sleep?",
                    "Consistent bedtime, no screens 1h before bed, cool/dark room, limit caffeine after noon.",
                ),
                FAQItem("Can stress affect sleep?", "Yes. Try breathing or grounding before bed."),
            ),
            faqs_sw=(
                FAQItem("Kuboresha usingizi?", "Muda wa kulala ulio sawa, epuka skrini kabla, chumba baridi/kiza."),
            ),
        ),
        TopicPack(
            id="trauma",
            name="Trauma",
            labels=("trauma", "flashback", "ptsd"),
            faqs_en=(
                FAQItem(
                    "What is grounding?",
                    "A quick technique to feel safe now using senses (5-4-3-2-1). Helpful with flashbacks.",
                ),
            ),
            faqs_sw=(
                FAQItem("Grounding ni nini?", "Njia ya kupata utulivu kwa kutumia hisia zako (5-4-3-2-1)."),
            ),
        ),
        TopicPack(
            id="relationships",
            name="Relationships",
            labels=("relationship", "partner", "family", "mapenzi", "uhusiano"),
            faqs_en=(
                FAQItem(
                    "How to communicate better?",
                    "Use “I” statements, listen to understand, summarize what you heard, and agree on a small next step.",
                ),
                FAQItem(
                    "Setting boundaries?",
                    "Be clear and kind: say what you can and cannot do, and repeat calmly if needed.",
                ),
            ),
            faqs_sw=(
                FAQItem(
                    "Kuwasiliana vyema?",
                    "Tumia sentensi za “Mimi…”, sikiliza kuelewa, rudia kwa ufupi ulichosikia, "
                    "kisha mkubaliane hatua ndogo.",
                ),
            ),
        ),
        TopicPack(
            id="grief",
            name="Grief",
            labels=("grief", "loss", "mourning", "msiba"),
            faqs_en=(
                FAQItem(
                    "Is grief normal?",
                    "Yes. Grief is a natural response to loss. Emotions can come in waves; be gentle with yourself.",
                ),
                FAQItem(
                    "How to cope day to day?",
                    "Keep simple routines, connect with someone you trust, and allow yourself to remember and feel.",
                ),
            ),
            faqs_sw=(
                FAQItem(
                    "Huzuni ya msiba ni ya kawaida?",
                    "Ndiyo. Ni mwitikio wa kawaida kwa upotevu. Hisia huja kwa mawimbi; jipe moyo na utulivu.",
                ),
            ),
        ),
        TopicPack(
            id="financial_stress",
            name="Financial Stress",
            labels=("money", "bills", "rent", "debt", "fedha"),
            faqs_en=(
                FAQItem(
                    "First steps for money stress?",
                    "List essentials, one small action today, and who can support (friend/family/community). "
                    "Breathe and pace yourself.",
                ),
                FAQItem(
                    "How to plan?",
                    "Create a simple weekly budget and review expenses; seek local support programs if available.",
                ),
            ),
            faqs_sw=(
                FAQItem(
                    "Kukabili msongo wa fedha?",
                    "Orodhesha muhimu, chukua hatua moja ndogo leo, na taja anayekusaidia. Pumua, nenda taratibu.",
                ),
            ),
        ),
        TopicPack(
            id="substance",
            name="Substance Use",
            labels=("alcohol", "drugs", "addiction", "ulevi", "mihadarati"),
            faqs_en=(
                FAQItem(
                    "What is urge surfing?",
                    "A skill to ride out cravings like waves: notice, breathe, wait 10 minutes, choose a supportive action.",
                ),
                FAQItem(
                    "Reducing harm?",
                    "Avoid triggers, plan alternatives, hydrate and eat, seek support, and consider counseling.",
                ),
            ),
            faqs_sw=(
                FAQItem(
                    "Urge surfing ni nini?",
                    "Ujuzi wa kupitisha hamu kali kama wimbi: tambua, pumua, subiri dakika 10, chagua tendo linalosaidia.",
                ),
            ),
        ),
        TopicPack(
            id="postpartum",
            name="Postpartum",
            labels=("postpartum", "after birth", "mtoto", "baada ya kujifungua"),
            faqs_en=(
                FAQItem(
                    "Postpartum mood changes?",
                    "Common in many parents. If sadness or anxiety persists or worsens, seek support early.",
                ),
                FAQItem(
                    "Self-care ideas?",
                    "Rest when you can, accept help, short walks, gentle check-ins with your feelings.",
                ),
            ),
            faqs_sw=(
                FAQItem(
                    "Mabadiliko ya hisia baada ya kujifungua?",
                    "Ni ya kawaida kwa wengi. Ikiwa huzuni/wasiwasi vinaendelea, tafuta msaada mapema.",
                ),
            ),
        ),
    )
)


SCREENINGS: dict[str, Screening] = {
    "PHQ2": Screening(
        code="PHQ2",
        questions_en=(
            "Over the last 2 weeks, how often have you had little interest or pleasure in doing things? (0-3)",
            "Over the last 2 weeks, how often have you felt down, depressed, or hopeless? (0-3)",
        ),
        questions_sw=(
            "Katika wiki 2 zilizopita, mara ngapi hukuwa na hamu au furaha kufanya mambo? (0-3)",
            "Katika wiki 2 zilizopita, mara ngapi umejisikia chini, huzuni, au kukosa matumaini? (0-3)",
        ),
    ),
    "GAD2": Screening(
        code="GAD2",
        questions_en=(
            "Feeling nervous, anxious, or on edge? (0-3)",
            "Not being able to stop or control worrying? (0-3)",
        ),
        questions_sw=(
            "Kujisikia wasiwasi au kutotulia? (0-3)",
            "Kushindwa kusimamisha au kudhibiti wasiwasi? (0-3)",
        ),
    ),
}

# Topics screened with PHQ-2; every other topic uses GAD-2.
MOOD_TOPICS = frozenset({"depression", "stress"})


EXERCISES: dict[str, Exercise] = {
    "box_breathing": Exercise(
        id="box_breathing",
        title_en="Box Breathing (4-4-4-4)",
        title_sw="Kupumua kwa Sanduku (4-4-4-4)",
        steps_en=(
            "Inhale through your nose for 4 seconds",
            "Hold your breath for 4 seconds",
            "Exhale slowly through your mouth for 4 seconds",
            "Hold for 4 seconds, then repeat for 2-4 minutes",
        ),
        steps_sw=(
            "Vuta pumzi kwa pua kwa sekunde 4",
            "Shikilia pumzi kwa sekunde 4",
            "Toa pumzi taratibu kwa mdomo kwa sekunde 4",
            "Subiri sekunde 4, kisha rudia kwa dakika 2-4",
        ),
    ),
    "grounding_54321": Exercise(
        id="grounding_54321",
        title_en="Grounding 5-4-3-2-1",
        title_sw="Njia ya utulivu 5-4-3-2-1",
        steps_en=(
            "5 things you can see",
            "4 things you can feel",
            "3 things you can hear",
            "2 things you can smell",
            "1 thing you can taste",
        ),
        steps_sw=(
            "Vitu 5 unavyoviona",
            "Vitu 4 unavyovihisi",
            "Vitu 3 unavyovisikia",
            "Vitu 2 unavyovinusa",
            "Kitu 1 unachokionja",
        ),
    ),
    "reframing": Exercise(
        id="reframing",
        title_en="Thought Reframing",
        title_sw="Kubadili Fikra",
        steps_en=(
            "Write down the thought that is bothering you",
            "Ask: what is the evidence for and against it?",
            "Write a kinder, more balanced version of the thought",
        ),
        steps_sw=(
            "Andika wazo linalokusumbua",
            "Jiulize: ushahidi gani unaliunga mkono au kulipinga?",
            "Andika toleo la upole na lenye uwiano zaidi la wazo hilo",
        ),
    ),
    "sleep_hygiene": Exercise(
        id="sleep_hygiene",
        title_en="Sleep Hygiene",
        title_sw="Usafi wa Usingizi",
        steps_en=(
            "Go to bed and wake up at the same time each day",
            "No screens for 1 hour before bed",
            "Keep the room cool, dark and quiet",
            "Limit caffeine after noon",
        ),
        steps_sw=(
            "Lala na uamke muda ule ule kila siku",
            "Epuka skrini saa 1 kabla ya kulala",
            "Chumba kiwe baridi, kiza na kimya",
            "Punguza kafeini baada ya mchana",
        ),
    ),
    "communication": Exercise(
        id="communication",
        title_en="Kind Communication",
        title_sw="Mawasiliano ya Upole",
        steps_en=(
            "Use “I” statements to share how you feel",
            "Listen to understand, not to reply",
            "Summarize what you heard",
            "Agree on one small next step",
        ),
        steps_sw=(
            "Tumia sentensi za “Mimi…” kueleza unavyojisikia",
            "Sikiliza kuelewa, si kujibu",
            "Rudia kwa ufupi ulichosikia",
            "Mkubaliane hatua moja ndogo",
        ),
    ),
    "urge_surfing": Exercise(
        id="urge_surfing",
        title_en="Urge Surfing",
        title_sw="Kupitisha Hamu Kali",
        steps_en=(
            "Notice the craving and where you feel it in your body",
            "Breathe slowly and watch it rise and fall like a wave",
            "Wait 10 minutes before deciding anything",
            "Choose one supportive action",
        ),
        steps_sw=(
            "Tambua hamu na mahali unapoihisi mwilini",
            "Pumua taratibu na uitazame ikipanda na kushuka kama wimbi",
            "Subiri dakika 10 kabla ya kuamua lolote",
            "Chagua tendo moja linalosaidia",
        ),
    ),
}


def get_topic(topic_id: str, topics: tuple[TopicPack, ...] = CARE_TOPICS) -> TopicPack | None:
    return next((t for t in topics if t.id == topic_id), None)
