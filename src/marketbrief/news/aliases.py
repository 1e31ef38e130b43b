from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType

MIN_BARE_SYMBOL_LENGTH = 2

DEFAULT_SYMBOLS = (
    "SPY",
    "QQQ",
    "DIA",
    "IWM",
    "TLT",
    "TSLA",
    "MSFT",
    "GOOGL",
    "C",
    "ABBV",
    "NVDA",
    "TSM",
    "WMT",
    "BSX",
    "EOG",
)

CURATED_ALIASES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "SPY": ("S&P 500", "SPDR S&P 500"),
        "QQQ": ("Nasdaq 100", "Invesco QQQ"),
        "DIA": ("Dow Jones", "Dow 30", "SPDR Dow Jones"),
        "IWM": ("Russell 2000", "iShares Russell 2000"),
        "TLT": ("Treasury", "Treasuries", "20 Year Treasury", "iShares 20 Year"),
        "TSLA": ("Tesla", "Elon Musk"),
        "MSFT": ("Microsoft",),
        "GOOGL": ("Alphabet", "Google"),
        "C": ("Citi", "Citigroup"),
        "ABBV": ("AbbVie",),
        "NVDA": ("Nvidia", "NVDA"),
        "TSM": ("TSMC", "Taiwan Semiconductor"),
        "WMT": ("Walmart",),
        "BSX": ("Boston Scientific",),
        "EOG": ("EOG Resources",),
    }
)


def normalize_symbols(symbols: Iterable[str]) -> list[str]:
    deduped: list[str] = []
    seen: set[str] = set()
    for raw in symbols:
        symbol = str(raw).strip().upper()
        if not symbol or symbol in seen:
            continue
        seen.add(symbol)
        deduped.append(symbol)
    return deduped


def parse_symbols(raw: str) -> list[str]:
    """Split a comma-separated symbol list, dropping blank entries."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def build_alias_index(
    symbols: Iterable[str],
    *,
    alias_table: Mapping[str, Iterable[str]] | None = None,
) -> dict[str, list[str]]:
    """Map each requested symbol to the aliases that identify it in free text.

    The bare token leads the list when it is long enough to be distinctive;
    single letters such as "C" would otherwise hit ordinary prose. The same
    length floor applies to table names. Symbols missing from the table keep
    only the bare token.
    """
    table = CURATED_ALIASES if alias_table is None else alias_table
    index: dict[str, list[str]] = {}
    for symbol in normalize_symbols(symbols):
        candidates: list[str] = []
        if len(symbol) >= MIN_BARE_SYMBOL_LENGTH:
            candidates.append(symbol)
        candidates.extend(table.get(symbol, ()))

        aliases: list[str] = []
        for alias in candidates:
            cleaned = alias.strip()
            if len(cleaned) < MIN_BARE_SYMBOL_LENGTH or cleaned in aliases:
                continue
            aliases.append(cleaned)
        index[symbol] = aliases
    return index


def load_alias_table(path: str | Path) -> Mapping[str, tuple[str, ...]]:
    return _load_alias_table_cached(str(Path(path).resolve()))


def resolve_alias_table(path: str | Path | None) -> Mapping[str, tuple[str, ...]]:
    """Return the curated table with entries from ``path`` layered on top.

    A symbol listed in the override file replaces its curated names; every
    other curated symbol keeps its defaults.
    """
    if not path:
        return CURATED_ALIASES
    merged = dict(CURATED_ALIASES)
    merged.update(load_alias_table(path))
    return MappingProxyType(merged)


@lru_cache(maxsize=8)
def _load_alias_table_cached(path: str) -> Mapping[str, tuple[str, ...]]:
    target = Path(path)
    if not target.exists():
        return MappingProxyType({})

    payload = json.loads(target.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("alias map file must contain a JSON object.")

    normalized: dict[str, tuple[str, ...]] = {}
    for symbol, names in payload.items():
        if not isinstance(symbol, str):
            continue
        clean_symbol = symbol.strip().upper()
        if not clean_symbol:
            continue
        if isinstance(names, str):
            names = [names]
        if not isinstance(names, list):
            continue
        clean_names = tuple(
            name.strip() for name in names if isinstance(name, str) and name.strip()
        )
        normalized[clean_symbol] = clean_names
    return MappingProxyType(normalized)
