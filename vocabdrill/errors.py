from __future__ import annotations


class VocabDrillError(Exception):
    """Base class for errors raised by vocabdrill."""


class PersistenceError(VocabDrillError):
    """The persistent store rejected a read or a write."""


class StateError(VocabDrillError):
    """A session operation was called outside the phase that allows it."""


class DuplicateWordError(VocabDrillError, ValueError):
    def __init__(self, word_id: str) -> None:
        super().__init__(f"Word already saved: {word_id!r}")
        self.word_id = word_id


class UnknownWordError(VocabDrillError, KeyError):
    def __init__(self, word_id: str) -> None:
        super().__init__(f"Word is not saved: {word_id!r}")
        self.word_id = word_id
