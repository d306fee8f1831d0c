from __future__ import annotations

import random
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from loguru import logger

from vocabdrill.config import JITTER_PCT, MASTERED_STAGE, STAGE_INTERVALS, ms
from vocabdrill.errors import DuplicateWordError, UnknownWordError
from vocabdrill.models import Card, Deck, SRSWord
from vocabdrill.store import ProgressStore

TRAINING_DECK_ID = "training"


def normalize_word(word: str) -> str:
    return word.strip().lower()


def next_due_for_stage(stage: int, now: int, jitter_pct: float = JITTER_PCT) -> int:
    """Return the next review time (epoch ms) for a stage with ±jitter.

    Stage should be in 1..5. Jitter is applied in whole days and the result
    is never less than one day after ``now``.
    """
    interval = STAGE_INTERVALS.get(stage, STAGE_INTERVALS[MASTERED_STAGE])
    jitter = int(round(interval * jitter_pct))
    delta = interval + random.randint(-jitter, jitter)
    delta = max(1, delta)
    return now + ms(timedelta(days=delta))


class WordScheduler:
    """Owns saved words and their spaced-repetition stage.

    Knew it: stage + 1 (capped at the mastered stage), next review pushed out
    by the stage interval.
    Forgot: stage back to 0, due again immediately (next review = now).
    """

    def __init__(self, store: ProgressStore) -> None:
        self._store = store
        self._words: Dict[str, SRSWord] = {}

    async def load(self) -> None:
        self._words = {w.id: w for w in await self._store.list_words()}
        logger.debug(f"Loaded {len(self._words)} saved words")

    def words(self) -> List[SRSWord]:
        return list(self._words.values())

    def has(self, word: str) -> bool:
        return normalize_word(word) in self._words

    def get(self, word_id: str) -> Optional[SRSWord]:
        return self._words.get(normalize_word(word_id))

    async def save(self, word: str, translation: str, now: int) -> SRSWord:
        word_id = normalize_word(word)
        if not word_id:
            raise ValueError("Word must not be blank")
        if word_id in self._words:
            raise DuplicateWordError(word_id)
        entry = SRSWord(id=word_id, translation=translation, stage=0, next_review_date=None, added_at=now)
        await self._store.write_word(
            word_id,
            {"translation": translation, "stage": 0, "next_review_date": None, "added_at": now},
        )
        self._words[word_id] = entry
        logger.debug(f"Saved word {word_id!r}")
        return entry

    async def remove(self, word_id: str) -> None:
        word_id = normalize_word(word_id)
        await self._store.delete_word(word_id)
        self._words.pop(word_id, None)

    async def advance(self, word_id: str, now: int) -> SRSWord:
        w = self._require(word_id)
        stage = min(w.stage + 1, MASTERED_STAGE)
        due = next_due_for_stage(stage, now)
        await self._store.write_word(w.id, {"stage": stage, "next_review_date": due})
        w.stage = stage
        w.next_review_date = due
        return w

    async def reset(self, word_id: str, now: int) -> SRSWord:
        w = self._require(word_id)
        await self._store.write_word(w.id, {"stage": 0, "next_review_date": now})
        w.stage = 0
        w.next_review_date = now
        return w

    def _require(self, word_id: str) -> SRSWord:
        w = self._words.get(normalize_word(word_id))
        if w is None:
            raise UnknownWordError(normalize_word(word_id))
        return w


def group_by_month(words: Iterable[SRSWord]) -> Dict[str, List[SRSWord]]:
    """Group words into "Month YYYY" buckets by when they were saved."""
    groups: Dict[str, List[SRSWord]] = defaultdict(list)
    for w in sorted((w for w in words if w.added_at is not None), key=lambda w: w.added_at or 0):
        added = datetime.fromtimestamp((w.added_at or 0) / 1000, tz=timezone.utc)
        groups[added.strftime("%B %Y")].append(w)
    return dict(groups)


def training_deck(words: Iterable[SRSWord]) -> Deck:
    """Return a virtual deck with one card per saved word."""
    cards = tuple(Card(id=w.id, spanish=w.id, english=w.translation) for w in words)
    return Deck(id=TRAINING_DECK_ID, title="Training", cards=cards, is_free=True)
