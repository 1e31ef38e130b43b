from __future__ import annotations

import json

import pytest

from marketbrief.news.aliases import (
    CURATED_ALIASES,
    build_alias_index,
    load_alias_table,
    parse_symbols,
    resolve_alias_table,
)


def test_build_alias_index_normalizes_and_dedupes_symbols() -> None:
    index = build_alias_index(["nvda", " TSLA ", "NVDA", ""])

    assert list(index) == ["NVDA", "TSLA"]
    assert index["NVDA"] == ["NVDA", "Nvidia"]
    assert index["TSLA"] == ["TSLA", "Tesla", "Elon Musk"]


def test_single_letter_symbol_is_excluded_from_its_own_aliases() -> None:
    index = build_alias_index(["C", "F"])

    assert index["C"] == ["Citi", "Citigroup"]
    assert index["F"] == []


def test_unknown_symbol_gets_bare_token_only() -> None:
    assert build_alias_index(["AVGO"]) == {"AVGO": ["AVGO"]}


def test_build_alias_index_is_deterministic() -> None:
    symbols = ["SPY", "qqq", "C", "ABBV"]
    assert build_alias_index(symbols) == build_alias_index(list(symbols))


def test_build_alias_index_accepts_custom_table() -> None:
    index = build_alias_index(["AVGO"], alias_table={"AVGO": ["Broadcom", "AVGO"]})

    assert index == {"AVGO": ["AVGO", "Broadcom"]}


def test_curated_aliases_are_read_only() -> None:
    with pytest.raises(TypeError):
        CURATED_ALIASES["XYZ"] = ("XYZ Corp",)  # type: ignore[index]


def test_load_alias_table_reads_json_object(tmp_path) -> None:
    path = tmp_path / "aliases.json"
    path.write_text(
        json.dumps({"avgo": ["Broadcom", " "], "AMD": "Advanced Micro Devices", "bad": 3}),
        encoding="utf-8",
    )

    table = load_alias_table(path)

    assert dict(table) == {"AVGO": ("Broadcom",), "AMD": ("Advanced Micro Devices",)}


def test_load_alias_table_missing_file_is_empty(tmp_path) -> None:
    assert dict(load_alias_table(tmp_path / "missing.json")) == {}


def test_load_alias_table_rejects_non_object(tmp_path) -> None:
    path = tmp_path / "aliases.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    with pytest.raises(ValueError):
        load_alias_table(path)


def test_parse_symbols_splits_comma_list() -> None:
    assert parse_symbols("SPY, qqq,,  ,NVDA") == ["SPY", "qqq", "NVDA"]


def test_short_table_names_are_dropped_from_the_index() -> None:
    index = build_alias_index(
        ["F", "C"],
        alias_table={"F": ["F", " ", "Ford"], "C": ["c", "Citi"]},
    )

    assert index == {"F": ["Ford"], "C": ["Citi"]}


def test_resolve_alias_table_layers_override_on_curated_names(tmp_path) -> None:
    path = tmp_path / "aliases.json"
    path.write_text(json.dumps({"AVGO": ["Broadcom"], "tsla": ["Tesla Inc"]}), encoding="utf-8")

    table = resolve_alias_table(path)
    index = build_alias_index(["NVDA", "AVGO", "TSLA"], alias_table=table)

    assert index == {
        "NVDA": ["NVDA", "Nvidia"],
        "AVGO": ["AVGO", "Broadcom"],
        "TSLA": ["TSLA", "Tesla Inc"],
    }
    assert CURATED_ALIASES["TSLA"] == ("Tesla", "Elon Musk")


def test_resolve_alias_table_without_path_is_curated_table() -> None:
    assert resolve_alias_table(None) is CURATED_ALIASES
