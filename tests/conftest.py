from __future__ import annotations

from typing import Any, Mapping, Optional

import pytest

from vocabdrill.errors import PersistenceError
from vocabdrill.models import Card, Deck, SRSWord


class MemoryStore:
    """In-memory ProgressStore/DeckCatalog with call recording."""

    def __init__(self, decks: Optional[list[Deck]] = None) -> None:
        self.mastery: dict[str, dict[str, int]] = {}
        self.words: dict[str, dict[str, Any]] = {}
        self.decks = {d.id: d for d in decks or []}
        self.xp = 0
        self.mastery_writes: list[tuple[str, str, int]] = []
        self.fail_writes = False

    async def get_mastery(self, deck_id: str) -> dict[str, int]:
        return dict(self.mastery.get(deck_id, {}))

    async def write_mastery(self, deck_id: str, card_id: str, mastery: int) -> None:
        if self.fail_writes:
            raise PersistenceError("write rejected")
        self.mastery_writes.append((deck_id, card_id, mastery))
        self.mastery.setdefault(deck_id, {})[card_id] = mastery

    async def get_word(self, word_id: str) -> Optional[SRSWord]:
        f = self.words.get(word_id)
        return SRSWord(id=word_id, **f) if f is not None else None

    async def list_words(self) -> list[SRSWord]:
        return [SRSWord(id=k, **v) for k, v in self.words.items()]

    async def write_word(self, word_id: str, fields: Mapping[str, Any]) -> None:
        if self.fail_writes:
            raise PersistenceError("write rejected")
        self.words.setdefault(word_id, {}).update(fields)

    async def delete_word(self, word_id: str) -> None:
        self.words.pop(word_id, None)

    async def add_xp(self, amount: int) -> None:
        self.xp += amount

    async def get_deck(self, deck_id: str) -> Optional[Deck]:
        return self.decks.get(deck_id)

    async def list_decks(self) -> list[Deck]:
        return list(self.decks.values())


def make_cards(n: int, without_vocab: tuple[int, ...] = ()) -> list[Card]:
    """Cards c1..cn; 1-based indexes in ``without_vocab`` get no word bank."""
    return [
        Card(
            id=f"c{i}",
            spanish=f"hola {i}",
            english=f"hello {i}",
            vocab=() if i in without_vocab else ("hola", str(i)),
        )
        for i in range(1, n + 1)
    ]


@pytest.fixture
def deck() -> Deck:
    return Deck(id="greetings", title="Greetings", cards=tuple(make_cards(3)))


@pytest.fixture
def store(deck: Deck) -> MemoryStore:
    return MemoryStore([deck, Deck(id="empty", title="Empty")])
