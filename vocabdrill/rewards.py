from __future__ import annotations

from loguru import logger

from vocabdrill.config import XP_PERFECT_SESSION, XP_STREAK_BONUS, XP_STREAK_LENGTH
from vocabdrill.store import ProgressStore


class XpTracker:
    """Awards XP and keeps a streak of consecutive awards.

    Every ``XP_STREAK_LENGTH``-th consecutive award carries a bonus and
    restarts the streak. The streak lives in memory only.
    """

    def __init__(self, store: ProgressStore, total_xp: int = 0) -> None:
        self._store = store
        self.total_xp = total_xp
        self.streak = 0

    async def award(self, amount: int) -> int:
        """Add ``amount`` (plus any streak bonus) and return what was awarded."""
        bonus = 0
        streak = self.streak + 1
        if streak == XP_STREAK_LENGTH:
            bonus = XP_STREAK_BONUS
            streak = 0
        self.streak = streak
        total = amount + bonus
        self.total_xp += total
        await self._store.add_xp(total)
        if bonus:
            logger.debug(f"Streak bonus awarded: +{bonus} XP")
        return total

    async def award_perfect_session(self) -> int:
        return await self.award(XP_PERFECT_SESSION)

    def reset_streak(self) -> None:
        self.streak = 0
