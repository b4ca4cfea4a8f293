from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class LifeStage(str, Enum):
    TEEN = "teen"
    ADULT = "adult"
    MENOPAUSE = "menopause"
    UNSET = "unset"


class Sender(str, Enum):
    USER = "user"
    BOT = "bot"


# Tip bucket used when no life-stage is known.
GENERAL_BUCKET = "general"


@dataclass(frozen=True)
class Turn:
    id: int
    text: str
    sender: Sender

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text, "sender": self.sender.value}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Turn:
        return cls(id=int(raw["id"]), text=str(raw["text"]), sender=Sender(raw["sender"]))


@dataclass(frozen=True)
class TopicRule:
    """A keyword group mapped to one canned reply.

    `keywords` are matched as substrings of the lower-cased utterance;
    `exact` entries must equal the whole lower-cased utterance.
    """

    name: str
    keywords: frozenset[str]
    reply: str
    exact: frozenset[str] = frozenset()

    def matches(self, lowered: str) -> bool:
        if lowered in self.exact:
            return True
        return any(keyword in lowered for keyword in self.keywords)


@dataclass(frozen=True)
class ResolvedIntent:
    detected_stage: LifeStage | None = None
    topic_reply: str | None = None
    topic: str | None = None


@dataclass(frozen=True)
class ConversationState:
    turns: tuple[Turn, ...] = ()
    life_stage: LifeStage = LifeStage.UNSET
    next_id: int = 1
    last_intent: ResolvedIntent | None = field(default=None, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "turns": [t.to_dict() for t in self.turns],
            "life_stage": self.life_stage.value,
            "next_id": self.next_id,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ConversationState:
        turns = tuple(Turn.from_dict(t) for t in raw.get("turns") or [])
        next_id = int(raw.get("next_id") or (max((t.id for t in turns), default=0) + 1))
        return cls(
            turns=turns,
            life_stage=LifeStage(raw.get("life_stage") or LifeStage.UNSET.value),
            next_id=next_id,
        )


@dataclass(frozen=True)
class SubmitUtterance:
    text: str


@dataclass(frozen=True)
class SelectLifeStage:
    stage: LifeStage


Action = Union[SubmitUtterance, SelectLifeStage]
