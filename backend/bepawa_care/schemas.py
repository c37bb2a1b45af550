from typing import List, Literal, Optional

from pydantic import BaseModel, Field


# --------------------
# Care chat
# --------------------


class CareChatIn(BaseModel):
    message: str
    lang: Literal["en", "sw", "auto"] = "auto"
    session_id: Optional[str] = None


class CareChatOut(BaseModel):
    session_id: str
    type: Literal["bot"] = "bot"
    content: str
    suggestions: List[str] = Field(default_factory=list, max_length=3)
    category: Literal["general", "safety", "education"]
    lang: Literal["en", "sw"]


class CareTurn(BaseModel):
    role: str
    text: str
    category: Optional[str] = None
    ts: Optional[str] = None


# --------------------
# Care content
# --------------------


class TopicOut(BaseModel):
    id: str
    name: str
    labels: List[str]
    faq_counts: dict[str, int]


class CareContentOut(BaseModel):
    content: str
    suggestions: List[str] = Field(default_factory=list)
    category: Literal["general", "safety", "education"] = "general"


class ScreeningScoreIn(BaseModel):
    values: List[int] = Field(min_length=2, max_length=2)
    lang: Literal["en", "sw"] = "en"
