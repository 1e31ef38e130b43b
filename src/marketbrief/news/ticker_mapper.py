from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from marketbrief.news.aliases import MIN_BARE_SYMBOL_LENGTH
from marketbrief.schemas import Article

_WORD_CHARS = "0-9A-Za-z"
_TICKER_TOKEN_PATTERN = re.compile(r"^[A-Z0-9]{2,}$")


@dataclass(slots=True, frozen=True)
class _CompiledAlias:
    alias: str
    pattern: re.Pattern[str] | None
    needle: str

    def hit(self, folded_text: str) -> bool:
        if self.pattern is not None:
            return self.pattern.search(folded_text) is not None
        return self.needle in folded_text


class AliasMatcher:
    """Precompiled alias table for one alias index."""

    def __init__(self, alias_index: Mapping[str, Sequence[str]]) -> None:
        self._table: list[tuple[str, tuple[_CompiledAlias, ...]]] = [
            (
                symbol,
                tuple(
                    compiled
                    for compiled in (_compile_alias(alias) for alias in aliases)
                    if compiled is not None
                ),
            )
            for symbol, aliases in alias_index.items()
        ]

    @property
    def symbols(self) -> list[str]:
        return [symbol for symbol, _ in self._table]

    def match(self, text: str) -> list[str]:
        folded = (text or "").casefold()
        if not folded.strip():
            return []
        return [
            symbol
            for symbol, compiled in self._table
            if any(alias.hit(folded) for alias in compiled)
        ]


def map_text_to_tickers(title: str, summary: str, *, matcher: AliasMatcher) -> list[str]:
    return matcher.match(f"{title or ''} {summary or ''}")


def annotate_tickers(
    articles: Iterable[Article],
    alias_index: Mapping[str, Sequence[str]],
) -> list[Article]:
    matcher = AliasMatcher(alias_index)
    return [
        article.model_copy(
            update={
                "tickers": map_text_to_tickers(
                    article.title,
                    article.summary,
                    matcher=matcher,
                )
            }
        )
        for article in articles
    ]


def _compile_alias(alias: str) -> _CompiledAlias | None:
    alias = alias.strip()
    # Single characters occur inside nearly every word.
    if len(alias) < MIN_BARE_SYMBOL_LENGTH:
        return None
    if _TICKER_TOKEN_PATTERN.match(alias):
        pattern = re.compile(
            rf"(?<![{_WORD_CHARS}]){re.escape(alias.casefold())}(?![{_WORD_CHARS}])",
            flags=re.IGNORECASE,
        )
        return _CompiledAlias(alias=alias, pattern=pattern, needle="")
    return _CompiledAlias(alias=alias, pattern=None, needle=alias.casefold())
