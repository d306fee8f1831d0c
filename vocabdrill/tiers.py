"""Bucket saved words into due-date display tiers.

``classify`` is pure: the caller supplies ``now`` (epoch ms) from its clock.
Interval bounds are half-open and relative to ``now``; "due now" extends to
the end of ``now``'s calendar day in the configured timezone.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time, tzinfo
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from vocabdrill.config import DEFAULT_TZ, MASTERED_STAGE, TIER_24H, TIER_3D, TIER_7D, ms
from vocabdrill.models import SRSWord


@dataclass
class DueTiers:
    due_now: list[SRSWord] = field(default_factory=list)
    due_within_24h: list[SRSWord] = field(default_factory=list)
    due_within_3d: list[SRSWord] = field(default_factory=list)
    due_within_7d: list[SRSWord] = field(default_factory=list)
    due_within_14d: list[SRSWord] = field(default_factory=list)
    mastered: list[SRSWord] = field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {
            "due_now": len(self.due_now),
            "due_within_24h": len(self.due_within_24h),
            "due_within_3d": len(self.due_within_3d),
            "due_within_7d": len(self.due_within_7d),
            "due_within_14d": len(self.due_within_14d),
            "mastered": len(self.mastered),
        }


def end_of_day(now: int, tz: Optional[tzinfo] = None) -> int:
    """Return the last millisecond of ``now``'s calendar day as epoch ms."""
    zone = tz or ZoneInfo(DEFAULT_TZ)
    local = datetime.fromtimestamp(now / 1000, tz=zone)
    last = datetime.combine(local.date(), time(23, 59, 59, 999000), tzinfo=zone)
    return int(last.timestamp() * 1000)


def _review_key(w: SRSWord) -> tuple[int, int]:
    # None sorts before any date
    if w.next_review_date is None:
        return (0, 0)
    return (1, w.next_review_date)


def classify(words: Iterable[SRSWord], now: int, tz: Optional[tzinfo] = None) -> DueTiers:
    tiers = DueTiers()
    day_end = end_of_day(now, tz)
    for w in sorted(words, key=_review_key):
        if w.stage >= MASTERED_STAGE:
            tiers.mastered.append(w)
            continue
        due = w.next_review_date
        if due is None or due <= day_end:
            tiers.due_now.append(w)
            continue
        delta = due - now
        if delta < ms(TIER_24H):
            tiers.due_within_24h.append(w)
        elif delta < ms(TIER_3D):
            tiers.due_within_3d.append(w)
        elif delta < ms(TIER_7D):
            tiers.due_within_7d.append(w)
        else:
            tiers.due_within_14d.append(w)
    return tiers
