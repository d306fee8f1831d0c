from __future__ import annotations

import contextlib
import json
import sqlite3
from pathlib import Path
from typing import Any, AsyncIterator, Mapping, Optional

import aiosqlite
from loguru import logger

from vocabdrill.config import DB_PATH
from vocabdrill.errors import PersistenceError
from vocabdrill.models import Card, Deck, SRSWord

WORD_FIELDS = ("translation", "stage", "next_review_date", "added_at")


@contextlib.asynccontextmanager
async def get_db(path: Optional[Path] = None) -> AsyncIterator[aiosqlite.Connection]:
    db = await aiosqlite.connect((path or DB_PATH).as_posix())
    db.row_factory = aiosqlite.Row
    try:
        yield db
    finally:
        await db.close()


async def init_db(path: Optional[Path] = None) -> None:
    target = path or DB_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    async with get_db(target) as db:
        await db.executescript(
            """
            PRAGMA journal_mode=WAL;

            CREATE TABLE IF NOT EXISTS decks (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                is_free INTEGER NOT NULL DEFAULT 1,
                price REAL NOT NULL DEFAULT 0
            );

            CREATE TABLE IF NOT EXISTS cards (
                deck_id TEXT NOT NULL,
                id TEXT NOT NULL,
                position INTEGER NOT NULL,
                spanish TEXT NOT NULL,
                english TEXT NOT NULL,
                vocab_json TEXT NOT NULL DEFAULT '[]',
                PRIMARY KEY(deck_id, id)
            );
            CREATE INDEX IF NOT EXISTS idx_cards_deck_pos ON cards(deck_id, position);

            CREATE TABLE IF NOT EXISTS mastery (
                user_id TEXT NOT NULL,
                deck_id TEXT NOT NULL,
                card_id TEXT NOT NULL,
                mastery INTEGER NOT NULL DEFAULT 0 CHECK(mastery >= 0),
                PRIMARY KEY(user_id, deck_id, card_id)
            );

            CREATE TABLE IF NOT EXISTS saved_words (
                user_id TEXT NOT NULL,
                id TEXT NOT NULL,
                translation TEXT NOT NULL DEFAULT '',
                stage INTEGER NOT NULL DEFAULT 0,
                next_review_date INTEGER,
                added_at INTEGER,
                PRIMARY KEY(user_id, id)
            );
            CREATE INDEX IF NOT EXISTS idx_saved_words_due ON saved_words(user_id, next_review_date);

            CREATE TABLE IF NOT EXISTS user_stats (
                user_id TEXT PRIMARY KEY,
                total_xp INTEGER NOT NULL DEFAULT 0
            );
            """
        )
        await db.commit()
    logger.info(f"Database initialized at {target}")


def _row_to_word(row: aiosqlite.Row) -> SRSWord:
    return SRSWord(
        id=str(row["id"]),
        translation=str(row["translation"]),
        stage=int(row["stage"]),
        next_review_date=int(row["next_review_date"]) if row["next_review_date"] is not None else None,
        added_at=int(row["added_at"]) if row["added_at"] is not None else None,
    )


class SqliteStore:
    """Per-user progress store and deck catalog over aiosqlite.

    Every storage failure surfaces as ``PersistenceError``.
    """

    def __init__(self, user_id: str, db_path: Optional[Path] = None) -> None:
        self.user_id = user_id
        self._path = db_path

    @contextlib.asynccontextmanager
    async def _db(self) -> AsyncIterator[aiosqlite.Connection]:
        try:
            async with get_db(self._path) as db:
                yield db
        except (aiosqlite.Error, sqlite3.Error) as exc:
            logger.warning(f"Store operation failed for user {self.user_id}: {exc}")
            raise PersistenceError(str(exc)) from exc

    # --- mastery ---

    async def get_mastery(self, deck_id: str) -> dict[str, int]:
        async with self._db() as db:
            cur = await db.execute(
                "SELECT card_id, mastery FROM mastery WHERE user_id=? AND deck_id=?",
                (self.user_id, deck_id),
            )
            return {str(r[0]): int(r[1]) for r in await cur.fetchall()}

    async def write_mastery(self, deck_id: str, card_id: str, mastery: int) -> None:
        async with self._db() as db:
            await db.execute(
                "INSERT INTO mastery(user_id, deck_id, card_id, mastery) VALUES(?,?,?,?) "
                "ON CONFLICT(user_id, deck_id, card_id) DO UPDATE SET mastery=excluded.mastery",
                (self.user_id, deck_id, card_id, mastery),
            )
            await db.commit()

    # --- saved words ---

    async def get_word(self, word_id: str) -> Optional[SRSWord]:
        async with self._db() as db:
            cur = await db.execute(
                "SELECT * FROM saved_words WHERE user_id=? AND id=?",
                (self.user_id, word_id),
            )
            row = await cur.fetchone()
        return _row_to_word(row) if row else None

    async def list_words(self) -> list[SRSWord]:
        async with self._db() as db:
            cur = await db.execute(
                "SELECT * FROM saved_words WHERE user_id=? ORDER BY added_at ASC",
                (self.user_id,),
            )
            return [_row_to_word(r) for r in await cur.fetchall()]

    async def write_word(self, word_id: str, fields: Mapping[str, Any]) -> None:
        unknown = set(fields) - set(WORD_FIELDS)
        if unknown:
            raise ValueError(f"Unknown word fields: {sorted(unknown)}")
        if not fields:
            return
        cols = list(fields.keys())
        placeholders = ", ".join("?" for _ in cols)
        updates = ", ".join(f"{c}=excluded.{c}" for c in cols)
        async with self._db() as db:
            await db.execute(
                f"INSERT INTO saved_words(user_id, id, {', '.join(cols)}) VALUES(?, ?, {placeholders}) "
                f"ON CONFLICT(user_id, id) DO UPDATE SET {updates}",
                [self.user_id, word_id, *fields.values()],
            )
            await db.commit()

    async def delete_word(self, word_id: str) -> None:
        async with self._db() as db:
            await db.execute(
                "DELETE FROM saved_words WHERE user_id=? AND id=?",
                (self.user_id, word_id),
            )
            await db.commit()

    # --- xp ---

    async def add_xp(self, amount: int) -> None:
        async with self._db() as db:
            await db.execute(
                "INSERT INTO user_stats(user_id, total_xp) VALUES(?, ?) "
                "ON CONFLICT(user_id) DO UPDATE SET total_xp = total_xp + excluded.total_xp",
                (self.user_id, amount),
            )
            await db.commit()

    async def get_xp(self) -> int:
        async with self._db() as db:
            cur = await db.execute("SELECT total_xp FROM user_stats WHERE user_id=?", (self.user_id,))
            row = await cur.fetchone()
        return int(row[0]) if row else 0

    # --- catalog ---

    async def get_deck(self, deck_id: str) -> Optional[Deck]:
        async with self._db() as db:
            cur = await db.execute("SELECT * FROM decks WHERE id=?", (deck_id,))
            row = await cur.fetchone()
            if row is None:
                return None
            cur = await db.execute(
                "SELECT * FROM cards WHERE deck_id=? ORDER BY position ASC",
                (deck_id,),
            )
            card_rows = await cur.fetchall()
        return _build_deck(row, card_rows)

    async def list_decks(self) -> list[Deck]:
        async with self._db() as db:
            cur = await db.execute("SELECT * FROM decks ORDER BY id ASC")
            deck_rows = await cur.fetchall()
            cur = await db.execute("SELECT * FROM cards ORDER BY deck_id ASC, position ASC")
            card_rows = await cur.fetchall()
        by_deck: dict[str, list[aiosqlite.Row]] = {}
        for r in card_rows:
            by_deck.setdefault(str(r["deck_id"]), []).append(r)
        return [_build_deck(d, by_deck.get(str(d["id"]), [])) for d in deck_rows]


def _build_deck(row: aiosqlite.Row, card_rows: list[aiosqlite.Row]) -> Deck:
    cards = tuple(
        Card(
            id=str(r["id"]),
            spanish=str(r["spanish"]),
            english=str(r["english"]),
            vocab=tuple(json.loads(r["vocab_json"] or "[]")),
        )
        for r in card_rows
    )
    return Deck(
        id=str(row["id"]),
        title=str(row["title"]),
        cards=cards,
        is_free=bool(row["is_free"]),
        price=float(row["price"]),
    )
