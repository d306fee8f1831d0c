#!/usr/bin/env python3
"""Seed the SQLite database with decks and cards from a CSV file.

CSV schema (header required), one row per card:
deck_id,deck_title,is_free,price,card_id,spanish,english,vocab

Deck columns repeat on every row of the deck; the first row wins.
``vocab`` is a JSON array of word-bank tokens (may be empty).

Usage:
    python scripts/seed_decks.py data/seed_decks.csv
"""
from __future__ import annotations

import argparse
import asyncio
import csv
import json
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from vocabdrill.db import get_db, init_db

REQUIRED_HEADER = [
    "deck_id",
    "deck_title",
    "is_free",
    "price",
    "card_id",
    "spanish",
    "english",
    "vocab",
]


async def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("csv_path", type=Path, help="Path to seed CSV file")
    args = parser.parse_args()

    await init_db()
    rows: list[dict[str, Any]] = list(parse_seed_csv(args.csv_path))
    await import_rows(rows)
    logger.info(f"Imported {len(rows)} cards into the database.")


async def import_rows(rows: Iterable[dict[str, Any]], path: Path | None = None) -> None:
    positions: dict[str, int] = {}
    async with get_db(path) as db:
        for r in rows:
            await db.execute(
                "INSERT OR IGNORE INTO decks(id, title, is_free, price) VALUES (?, ?, ?, ?)",
                (r["deck_id"], r["deck_title"], 1 if r["is_free"] else 0, r["price"]),
            )
            pos = positions.get(r["deck_id"], 0)
            positions[r["deck_id"]] = pos + 1
            await db.execute(
                """
                INSERT OR IGNORE INTO cards(deck_id, id, position, spanish, english, vocab_json)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    r["deck_id"],
                    r["card_id"],
                    pos,
                    r["spanish"],
                    r["english"],
                    json.dumps(r["vocab"], ensure_ascii=False, separators=(",", ":")),
                ),
            )
        await db.commit()


def parse_seed_csv(path: Path) -> Iterable[dict[str, Any]]:
    """Yield validated card rows from the seed CSV.

    Validates header order, the ``vocab`` JSON array, ``is_free`` booleans and
    ``price`` numbers. Duplicate (deck_id, card_id) pairs in the file are ignored.
    """
    seen: set[tuple[str, str]] = set()
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        header = reader.fieldnames or []
        if header != REQUIRED_HEADER:
            raise SystemExit(
                f"Invalid header. Expected {REQUIRED_HEADER}, got {header}"
            )
        for i, row in enumerate(reader, start=2):
            deck_id = (row.get("deck_id") or "").strip()
            card_id = (row.get("card_id") or "").strip()
            if not deck_id or not card_id:
                raise SystemExit(f"Row {i}: empty deck_id or card_id")
            spanish = (row.get("spanish") or "").strip()
            english = (row.get("english") or "").strip()
            if not spanish or not english:
                raise SystemExit(f"Row {i}: empty spanish or english")
            try:
                vocab = json.loads(row.get("vocab") or "[]")
                if not (isinstance(vocab, list) and all(isinstance(x, str) for x in vocab)):
                    raise ValueError
            except ValueError:
                raise SystemExit(f"Row {i}: invalid vocab JSON array: {row.get('vocab')}")
            is_free = (row.get("is_free") or "").strip().lower()
            if is_free not in {"true", "false"}:
                raise SystemExit(f"Row {i}: is_free must be true|false")
            try:
                price = float((row.get("price") or "0").strip())
            except ValueError:
                raise SystemExit(f"Row {i}: invalid price")
            if (deck_id, card_id) in seen:
                continue
            seen.add((deck_id, card_id))
            yield {
                "deck_id": deck_id,
                "deck_title": (row.get("deck_title") or deck_id).strip(),
                "is_free": is_free == "true",
                "price": price,
                "card_id": card_id,
                "spanish": spanish,
                "english": english,
                "vocab": vocab,
            }


if __name__ == "__main__":
    asyncio.run(main())
