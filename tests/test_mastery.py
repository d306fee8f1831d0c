from __future__ import annotations

import random

import pytest

from conftest import MemoryStore, make_cards
from vocabdrill.errors import PersistenceError
from vocabdrill.mastery import MasteryTracker
from vocabdrill.models import Deck


@pytest.mark.asyncio
async def test_correct_increments_and_incorrect_resets(store: MemoryStore) -> None:
    tracker = MasteryTracker(store, store)
    assert await tracker.update("greetings", "c1", True) == 1
    assert await tracker.update("greetings", "c1", True) == 2
    assert await tracker.update("greetings", "c1", False) == 0
    assert await tracker.update("greetings", "c1", True) == 1
    assert store.mastery_writes[-1] == ("greetings", "c1", 1)


@pytest.mark.asyncio
async def test_random_answer_sequence_never_negative(store: MemoryStore) -> None:
    random.seed(5)
    tracker = MasteryTracker(store, store)
    prev = 0
    for _ in range(200):
        knew = random.random() < 0.6
        new = await tracker.update("greetings", "c2", knew)
        assert new == (prev + 1 if knew else 0)
        assert new >= 0
        prev = new


@pytest.mark.asyncio
async def test_completion_threshold_scenario(store: MemoryStore) -> None:
    tracker = MasteryTracker(store, store)
    await tracker.load("greetings")
    for cid in ("c1", "c2", "c3"):
        await tracker.update("greetings", cid, True)
    assert [tracker.mastery("greetings", c) for c in ("c1", "c2", "c3")] == [1, 1, 1]
    assert tracker.completion_percentage("greetings") == 0

    await tracker.update("greetings", "c1", True)
    await tracker.update("greetings", "c1", True)
    assert tracker.mastery("greetings", "c1") == 3
    assert tracker.completion_percentage("greetings") == 33

    for cid in ("c2", "c3"):
        await tracker.update("greetings", cid, True)
        await tracker.update("greetings", cid, True)
    assert tracker.completion_percentage("greetings") == 100


@pytest.mark.asyncio
async def test_completion_zero_for_empty_and_unknown_decks(store: MemoryStore) -> None:
    tracker = MasteryTracker(store, store)
    await tracker.load("empty")
    assert tracker.completion_percentage("empty") == 0
    assert tracker.completion_percentage("nope") == 0


@pytest.mark.asyncio
async def test_load_reads_existing_record(store: MemoryStore) -> None:
    store.mastery["greetings"] = {"c1": 4, "c2": 3}
    tracker = MasteryTracker(store, store)
    await tracker.load("greetings")
    assert tracker.completion_percentage("greetings") == 67
    assert await tracker.update("greetings", "c1", True) == 5


@pytest.mark.asyncio
async def test_failed_write_propagates_and_keeps_optimistic_value(store: MemoryStore) -> None:
    tracker = MasteryTracker(store, store)
    await tracker.load("greetings")
    store.fail_writes = True
    with pytest.raises(PersistenceError):
        await tracker.update("greetings", "c1", True)
    assert tracker.mastery("greetings", "c1") == 1


@pytest.mark.asyncio
async def test_seen_lesson_score_and_account_stats() -> None:
    d1 = Deck(id="d1", title="One", cards=tuple(make_cards(2)))
    d2 = Deck(id="d2", title="Two", cards=tuple(make_cards(4)))
    store = MemoryStore([d1, d2, Deck(id="empty", title="Empty")])
    store.mastery["d1"] = {"c1": 3, "c2": 5}
    store.mastery["d2"] = {"c1": 0, "c2": 1}
    tracker = MasteryTracker(store, store)
    for deck_id in ("d1", "d2", "empty"):
        await tracker.load(deck_id)

    assert tracker.seen_percentage("d2") == 50.0
    assert tracker.lesson_score("d2", d2.cards) == 25
    stats = tracker.account_stats(["d1", "d2", "empty"])
    assert stats.total_cards_mastered == 2
    assert stats.decks_completed == 1
