from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from marketbrief.news.aliases import normalize_symbols
from marketbrief.schemas import Article

DEFAULT_TARGET = 12
DEFAULT_MAX_PER_SYMBOL = 2


@dataclass(slots=True)
class SelectionState:
    target: int
    selected: list[Article] = field(default_factory=list)
    selected_keys: set[str] = field(default_factory=set)
    per_symbol: dict[str, int] = field(default_factory=dict)

    @property
    def is_full(self) -> bool:
        return len(self.selected) >= self.target

    def is_selected(self, article: Article) -> bool:
        return article.identity_key() in self.selected_keys

    def count_for(self, symbol: str) -> int:
        return self.per_symbol.get(symbol, 0)

    def add(self, article: Article, symbol: str | None = None) -> bool:
        key = article.identity_key()
        if key in self.selected_keys:
            return False
        self.selected.append(article)
        self.selected_keys.add(key)
        if symbol is not None:
            self.per_symbol[symbol] = self.count_for(symbol) + 1
        return True


def select_balanced(
    articles: Sequence[Article],
    symbols: Sequence[str],
    *,
    target: int | None = None,
    max_per_symbol: int = DEFAULT_MAX_PER_SYMBOL,
    default_target: int = DEFAULT_TARGET,
) -> list[Article]:
    """Pick a bounded, symbol-diverse subset of annotated articles.

    Every symbol gets one slot before any symbol gets a second, no symbol
    claims more than ``max_per_symbol`` slots while tagged articles remain,
    and untagged articles backfill whatever is left. Ties resolve in input
    order.
    """
    if target is not None and target < 0:
        raise ValueError("target must be >= 0")
    if max_per_symbol < 1:
        raise ValueError("max_per_symbol must be >= 1")

    pool = list(articles)
    limit = min(default_target if target is None else target, len(pool))
    tracked = normalize_symbols(symbols)
    state = SelectionState(
        target=limit,
        per_symbol={symbol: 0 for symbol in tracked},
    )
    if limit == 0:
        return []

    prioritized = _tagged_first(pool)
    _coverage_pass(state, prioritized, tracked)
    _capped_fill_pass(state, prioritized, max_per_symbol=max_per_symbol)
    _backfill_pass(state, pool)

    if not state.selected:
        return prioritized[:limit]
    return list(state.selected)


def _coverage_pass(
    state: SelectionState,
    pool: Sequence[Article],
    symbols: Sequence[str],
) -> None:
    for symbol in symbols:
        if state.is_full:
            return
        for article in pool:
            if symbol in article.tickers and not state.is_selected(article):
                state.add(article, symbol)
                break


def _capped_fill_pass(
    state: SelectionState,
    pool: Sequence[Article],
    *,
    max_per_symbol: int,
) -> None:
    for article in pool:
        if state.is_full:
            return
        if state.is_selected(article):
            continue
        assignee = next(
            (symbol for symbol in article.tickers if state.count_for(symbol) < max_per_symbol),
            None,
        )
        if assignee is not None:
            state.add(article, assignee)


def _backfill_pass(state: SelectionState, pool: Sequence[Article]) -> None:
    for article in pool:
        if state.is_full:
            return
        state.add(article)


def _tagged_first(pool: Sequence[Article]) -> list[Article]:
    tagged = [article for article in pool if article.tickers]
    untagged = [article for article in pool if not article.tickers]
    return tagged + untagged
