from __future__ import annotations

import os
from datetime import timedelta
from pathlib import Path
from typing import Final

from dotenv import load_dotenv


load_dotenv()

ROOT_DIR: Final[Path] = Path(__file__).resolve().parents[1]
DATA_DIR: Final[Path] = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))
DB_PATH: Final[Path] = DATA_DIR / "vocabdrill.db"


def parse_tz(s: str | None) -> str:
    """Return an IANA zone name, UTC when unset or blank."""
    return (s or "").strip() or "UTC"


# Calendar-day boundary for the "due now" tier
DEFAULT_TZ: Final[str] = parse_tz(os.getenv("TZ"))

# Deck mastery: a card counts as mastered at this many consecutive correct answers
MASTERY_THRESHOLD: Final[int] = 3

# Saved words: stage at which a word leaves active scheduling
MASTERED_STAGE: Final[int] = 5

# Review intervals in days for stages 1..5
STAGE_INTERVALS: Final[dict[int, int]] = {
    1: 1,
    2: 3,
    3: 7,
    4: 14,
    5: 30,
}

JITTER_PCT: Final[float] = float(os.getenv("JITTER_PCT", "0.15"))

# Due-tier boundaries, relative to "now"
TIER_24H: Final[timedelta] = timedelta(hours=24)
TIER_3D: Final[timedelta] = timedelta(days=3)
TIER_7D: Final[timedelta] = timedelta(days=7)

# XP rewards
XP_STREAK_LENGTH: Final[int] = int(os.getenv("XP_STREAK_LENGTH", "5"))
XP_STREAK_BONUS: Final[int] = int(os.getenv("XP_STREAK_BONUS", "50"))
XP_PERFECT_SESSION: Final[int] = int(os.getenv("XP_PERFECT_SESSION", "100"))


def ms(delta: timedelta) -> int:
    """Return a timedelta as whole milliseconds."""
    return int(delta.total_seconds() * 1000)
