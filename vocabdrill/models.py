from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional

ExerciseType = Literal["listen", "mcq", "fill"]
Mode = Literal["flashcards", "practice", "test"]
Phase = Literal["loading", "learn", "practice", "complete"]

EXERCISE_TYPES: tuple[ExerciseType, ...] = ("listen", "mcq", "fill")
FALLBACK_TYPES: tuple[ExerciseType, ...] = ("listen", "mcq")

# deck_id -> card_id -> mastery
MasteryRecord = dict[str, dict[str, int]]


@dataclass(frozen=True)
class Card:
    id: str
    spanish: str
    english: str
    vocab: tuple[str, ...] = ()

    @property
    def has_vocab(self) -> bool:
        return len(self.vocab) > 0


@dataclass(frozen=True)
class Deck:
    id: str
    title: str
    cards: tuple[Card, ...] = ()
    is_free: bool = True
    price: float = 0.0


@dataclass
class SRSWord:
    id: str
    translation: str
    stage: int = 0
    next_review_date: Optional[int] = None  # epoch ms; None means due now
    added_at: Optional[int] = None  # epoch ms


@dataclass(frozen=True)
class ExerciseItem:
    card: Card
    exercise_type: ExerciseType


@dataclass
class SessionState:
    phase: Phase = "loading"
    queue: list[ExerciseItem] = field(default_factory=list)
    cursor: int = 0
    score: int = 0
