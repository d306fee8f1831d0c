"""Interfaces of the collaborators the core is wired to.

The core never talks to a database, a network or the system clock directly;
callers inject objects satisfying these protocols (see ``vocabdrill.db`` for
the SQLite-backed implementation).
"""

from __future__ import annotations

import time
from typing import Any, Mapping, Optional, Protocol

from vocabdrill.models import Deck, SRSWord


class ProgressStore(Protocol):
    """Per-user persistent store for deck mastery, saved words and XP.

    Writes have merge semantics: only the named fields are touched.
    Implementations raise ``PersistenceError`` when a read or write fails.
    """

    async def get_mastery(self, deck_id: str) -> dict[str, int]:
        ...

    async def write_mastery(self, deck_id: str, card_id: str, mastery: int) -> None:
        ...

    async def get_word(self, word_id: str) -> Optional[SRSWord]:
        ...

    async def list_words(self) -> list[SRSWord]:
        ...

    async def write_word(self, word_id: str, fields: Mapping[str, Any]) -> None:
        ...

    async def delete_word(self, word_id: str) -> None:
        ...

    async def add_xp(self, amount: int) -> None:
        ...


class DeckCatalog(Protocol):
    """Read-only lookup of decks."""

    async def get_deck(self, deck_id: str) -> Optional[Deck]:
        ...

    async def list_decks(self) -> list[Deck]:
        ...


class Clock(Protocol):
    def now(self) -> int:
        """Current time as epoch milliseconds."""
        ...


class SystemClock:
    def now(self) -> int:
        return int(time.time() * 1000)
