"""Learn/practice/test session state machine.

Phases: loading -> learn (flashcards mode) or practice (practice/test modes)
-> complete. Only test mode persists mastery; practice mode is a dry run.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from loguru import logger

from vocabdrill.errors import StateError
from vocabdrill.mastery import MasteryTracker
from vocabdrill.models import Card, ExerciseItem, Mode, Phase, SessionState
from vocabdrill.queue import build_practice_queue, shuffled

MODES: tuple[Mode, ...] = ("flashcards", "practice", "test")


@dataclass(frozen=True)
class SessionResult:
    score: int
    total: int


class SessionOrchestrator:
    def __init__(
        self,
        deck_id: str,
        mode: Mode,
        tracker: Optional[MasteryTracker] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        if mode not in MODES:
            raise ValueError(f"Unknown session mode: {mode!r}")
        if mode == "test" and tracker is None:
            raise ValueError("Test sessions need a MasteryTracker")
        self.deck_id = deck_id
        self.mode: Mode = mode
        self._tracker = tracker
        self._rng = rng
        self._state = SessionState()
        self._cards: list[Card] = []
        self._missed: list[ExerciseItem] = []
        self._processing = False

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def queue(self) -> list[ExerciseItem]:
        return list(self._state.queue)

    @property
    def cursor(self) -> int:
        return self._state.cursor

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def processing(self) -> bool:
        """True while a mastery write of this session is awaited."""
        return self._processing

    @property
    def missed(self) -> list[ExerciseItem]:
        return list(self._missed)

    @property
    def perfect(self) -> bool:
        return self.phase == "complete" and self.mode != "flashcards" and not self._missed

    @property
    def current(self) -> Optional[Union[Card, ExerciseItem]]:
        """Card being learned (learn) or exercise pending an answer (practice)."""
        st = self._state
        if st.phase == "learn" and st.cursor < len(self._cards):
            return self._cards[st.cursor]
        if st.phase == "practice" and st.cursor < len(st.queue):
            return st.queue[st.cursor]
        return None

    @property
    def progress(self) -> tuple[int, int]:
        """(1-based position, total) within the current phase."""
        total = len(self._cards) if self.mode == "flashcards" else len(self._state.queue)
        return min(self._state.cursor + 1, total), total

    def start(self, cards: Sequence[Card]) -> Phase:
        if self._state.phase != "loading":
            raise StateError(f"Session already started (phase={self._state.phase})")
        if not cards:
            # Nothing to show yet; stay in loading
            return self._state.phase
        self._cards = list(cards)
        if self.mode == "flashcards":
            self._state.phase = "learn"
            self._state.cursor = 0
        else:
            self._state.queue = build_practice_queue(self._cards, self._rng)
            self._state.cursor = 0
            self._state.phase = "practice"
        logger.debug(f"Session {self.deck_id}/{self.mode} started: {self._state.phase}, {len(self._cards)} cards")
        return self._state.phase

    def advance(self) -> Phase:
        st = self._state
        if st.phase != "learn":
            raise StateError(f"advance() is only valid while learning (phase={st.phase})")
        st.cursor += 1
        if st.cursor >= len(self._cards):
            st.phase = "complete"
            logger.debug(f"Session {self.deck_id}/{self.mode} complete")
        return st.phase

    async def answer(self, was_correct: bool) -> Phase:
        st = self._state
        if st.phase != "practice":
            raise StateError(f"answer() is only valid while practising (phase={st.phase})")
        if self._processing:
            raise StateError("Previous answer is still being saved")
        if st.cursor >= len(st.queue):
            raise StateError("No pending exercise to answer")
        item = st.queue[st.cursor]
        if was_correct:
            st.score += 1
        else:
            self._missed.append(item)
        st.cursor += 1
        if st.cursor >= len(st.queue):
            st.phase = "complete"
            logger.debug(f"Session {self.deck_id}/{self.mode} complete: {st.score}/{len(st.queue)}")

        if self.mode == "test" and self._tracker is not None:
            self._processing = True
            try:
                await self._tracker.update(self.deck_id, item.card.id, was_correct)
            finally:
                self._processing = False
        return st.phase

    def result(self) -> Optional[SessionResult]:
        if self._state.phase != "complete":
            raise StateError(f"Session is not complete (phase={self._state.phase})")
        if self.mode == "flashcards":
            return None
        return SessionResult(score=self._state.score, total=len(self._state.queue))

    def retry_missed(self) -> "SessionOrchestrator":
        """Return a practice session over the cards missed in this one.

        Only offered after a scored session with at least one miss.
        """
        if self._state.phase != "complete":
            raise StateError(f"Session is not complete (phase={self._state.phase})")
        if self.mode == "flashcards":
            raise StateError("Flashcard sessions have no missed cards to retry")
        if not self._missed:
            raise StateError("No missed cards to retry")
        retry = SessionOrchestrator(self.deck_id, "practice", rng=self._rng)
        retry.start(shuffled([it.card for it in self._missed], self._rng))
        return retry
