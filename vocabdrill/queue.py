from __future__ import annotations

import random
from typing import List, Optional, Sequence

from loguru import logger

from vocabdrill.models import EXERCISE_TYPES, FALLBACK_TYPES, Card, ExerciseItem, ExerciseType


def shuffled(cards: Sequence[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """Return a uniformly permuted copy of ``cards``."""
    r = rng or random
    out = list(cards)
    r.shuffle(out)
    return out


def eligible_types(card: Card, previous: Optional[ExerciseType]) -> List[ExerciseType]:
    """Exercise types allowed for ``card`` right after ``previous``.

    Never empty: when adjacency and vocab rules leave nothing, falls back
    to listen/mcq, which may repeat the previous type.
    """
    types = [t for t in EXERCISE_TYPES if t != previous]
    if not card.has_vocab:
        types = [t for t in types if t != "fill"]
    if not types:
        types = list(FALLBACK_TYPES)
    return types


def build_practice_queue(cards: Sequence[Card], rng: Optional[random.Random] = None) -> List[ExerciseItem]:
    """Build a shuffled, type-balanced exercise queue, one item per card.

    - Fill is only assigned to cards with a word bank (vocab).
    - Adjacent items do not share a type unless the fallback is forced.
    """
    r = rng or random
    queue: List[ExerciseItem] = []
    previous: Optional[ExerciseType] = None
    for card in shuffled(cards, r):
        choice = r.choice(eligible_types(card, previous))
        queue.append(ExerciseItem(card=card, exercise_type=choice))
        previous = choice
    logger.debug(f"Built practice queue of {len(queue)} items")
    return queue
