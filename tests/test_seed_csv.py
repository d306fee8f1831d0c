from __future__ import annotations

from pathlib import Path

import pytest

from scripts.seed_decks import REQUIRED_HEADER, parse_seed_csv


def write_csv(path: Path, lines: list[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_seed_csv_rows_and_types(tmp_path: Path) -> None:
    path = write_csv(
        tmp_path / "decks.csv",
        [
            ",".join(REQUIRED_HEADER),
            'greet,Greetings,true,0,g1,hola,hello,"[""hola""]"',
            "greet,Greetings,true,0,g2,adiós,goodbye,[]",
            "greet,Greetings,true,0,g2,adiós,goodbye,[]",
            "food,Food,false,1.99,f1,pan,bread,",
        ],
    )
    rows = list(parse_seed_csv(path))
    assert [(r["deck_id"], r["card_id"]) for r in rows] == [("greet", "g1"), ("greet", "g2"), ("food", "f1")]
    assert rows[0]["vocab"] == ["hola"]
    assert rows[2]["vocab"] == []
    assert rows[2]["is_free"] is False and rows[2]["price"] == 1.99


def test_seed_csv_rejects_bad_header(tmp_path: Path) -> None:
    path = write_csv(tmp_path / "bad.csv", ["deck,title", "a,b"])
    with pytest.raises(SystemExit):
        list(parse_seed_csv(path))


def test_seed_csv_rejects_bad_vocab(tmp_path: Path) -> None:
    path = write_csv(
        tmp_path / "bad.csv",
        [",".join(REQUIRED_HEADER), "greet,Greetings,true,0,g1,hola,hello,notjson"],
    )
    with pytest.raises(SystemExit):
        list(parse_seed_csv(path))
