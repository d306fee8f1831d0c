from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from loguru import logger

from vocabdrill.config import MASTERY_THRESHOLD
from vocabdrill.models import Card, Deck, MasteryRecord
from vocabdrill.store import DeckCatalog, ProgressStore


@dataclass(frozen=True)
class AccountStats:
    total_cards_mastered: int
    decks_completed: int


def _percent(part: int, whole: int) -> int:
    if whole == 0:
        return 0
    # Half-up rounding, so 50.5 -> 51 rather than banker's 50
    return int(math.floor(part * 100 / whole + 0.5))


class MasteryTracker:
    """Owns per-deck, per-card mastery counters.

    A correct answer adds one, an incorrect answer resets to zero. The
    in-memory record is updated first, then merge-written to the store;
    a failed write propagates to the caller and the in-memory value stays.
    """

    def __init__(self, store: ProgressStore, catalog: DeckCatalog) -> None:
        self._store = store
        self._catalog = catalog
        self._record: MasteryRecord = {}
        self._cards: dict[str, tuple[str, ...]] = {}

    async def load(self, deck_id: str) -> None:
        deck = await self._catalog.get_deck(deck_id)
        if deck is not None:
            self.track(deck)
        else:
            self._cards.setdefault(deck_id, ())
        self._record[deck_id] = dict(await self._store.get_mastery(deck_id))
        logger.debug(f"Loaded mastery for deck {deck_id}: {len(self._record[deck_id])} cards")

    def track(self, deck: Deck) -> None:
        """Register a deck's card list without touching the store."""
        self._cards[deck.id] = tuple(c.id for c in deck.cards)

    def mastery(self, deck_id: str, card_id: str) -> int:
        return self._record.get(deck_id, {}).get(card_id, 0)

    async def update(self, deck_id: str, card_id: str, knew_it: bool) -> int:
        if deck_id not in self._record:
            await self.load(deck_id)
        current = self.mastery(deck_id, card_id)
        new_mastery = current + 1 if knew_it else 0
        self._record[deck_id][card_id] = new_mastery
        try:
            await self._store.write_mastery(deck_id, card_id, new_mastery)
        except Exception:
            logger.warning(f"Mastery write failed for {deck_id}/{card_id}")
            raise
        return new_mastery

    def completion_percentage(self, deck_id: str) -> int:
        cards = self._cards.get(deck_id, ())
        mastered = sum(1 for cid in cards if self.mastery(deck_id, cid) >= MASTERY_THRESHOLD)
        return _percent(mastered, len(cards))

    def seen_percentage(self, deck_id: str) -> float:
        cards = self._cards.get(deck_id, ())
        if not cards:
            return 0.0
        record = self._record.get(deck_id, {})
        seen = sum(1 for cid in cards if cid in record)
        return seen / len(cards) * 100

    def lesson_score(self, deck_id: str, cards: Sequence[Card]) -> int:
        """Share of the lesson's cards answered correctly at least once."""
        correct = sum(1 for c in cards if self.mastery(deck_id, c.id) >= 1)
        return _percent(correct, len(cards))

    def account_stats(self, deck_ids: Iterable[str]) -> AccountStats:
        total = 0
        completed = 0
        for deck_id in deck_ids:
            cards = self._cards.get(deck_id, ())
            if not cards:
                continue
            mastered = sum(1 for cid in cards if self.mastery(deck_id, cid) >= MASTERY_THRESHOLD)
            total += mastered
            if mastered == len(cards):
                completed += 1
        return AccountStats(total_cards_mastered=total, decks_completed=completed)
