from __future__ import annotations

from typing import List, Tuple

from vocabdrill.models import Card, Deck
from vocabdrill.store import DeckCatalog


def has_access(deck: Deck, is_admin: bool = False, has_subscription: bool = False) -> bool:
    """Free decks are open to everyone; premium decks need admin or a subscription."""
    return deck.is_free or is_admin or has_subscription


def split_lessons(deck: Deck, size: int) -> List[Tuple[Card, ...]]:
    """Split a deck's cards into consecutive lessons of at most ``size`` cards."""
    if size <= 0:
        raise ValueError("Lesson size must be positive")
    return [deck.cards[i : i + size] for i in range(0, len(deck.cards), size)]


async def session_cards(catalog: DeckCatalog, deck_id: str) -> List[Card]:
    """Return the card list of a deck for a session; empty if the deck is unknown."""
    deck = await catalog.get_deck(deck_id)
    if deck is None:
        return []
    return list(deck.cards)
