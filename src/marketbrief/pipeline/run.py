from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from time import perf_counter

from marketbrief.news.aliases import build_alias_index
from marketbrief.news.dedupe import dedupe_by_title, dedupe_by_title_and_link
from marketbrief.news.feed_fetcher import FeedFetcher
from marketbrief.news.selector import DEFAULT_MAX_PER_SYMBOL, select_balanced
from marketbrief.news.ticker_mapper import annotate_tickers
from marketbrief.schemas import Article, FeedSource

logger = logging.getLogger(__name__)

DEFAULT_AI_LIMIT = 12
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(slots=True, frozen=True)
class AggregationStats:
    feeds: int
    fetched: int
    unique: int
    duplicates_dropped: int
    tagged: int
    selected: int
    duration_seconds: float


@dataclass(slots=True, frozen=True)
class AggregationResult:
    articles: list[Article]
    stats: AggregationStats

    def to_payload(self) -> dict[str, list[dict[str, object]]]:
        return {"news": [article.to_payload() for article in self.articles]}


def aggregate_top_news(
    *,
    feeds: Sequence[FeedSource],
    symbols: Sequence[str],
    fetcher: FeedFetcher,
    target: int | None = None,
    max_per_symbol: int = DEFAULT_MAX_PER_SYMBOL,
    alias_table: Mapping[str, Iterable[str]] | None = None,
) -> AggregationResult:
    """Run fetch -> dedupe -> annotate -> select for one request."""
    started_at = perf_counter()
    active_feeds = [feed for feed in feeds if feed.enabled]

    fetched = fetcher.fetch_all(active_feeds)
    unique, dropped = dedupe_by_title(fetched)
    alias_index = build_alias_index(symbols, alias_table=alias_table)
    annotated = annotate_tickers(unique, alias_index)
    selected = select_balanced(
        annotated,
        list(alias_index),
        target=target,
        max_per_symbol=max_per_symbol,
    )

    stats = AggregationStats(
        feeds=len(active_feeds),
        fetched=len(fetched),
        unique=len(unique),
        duplicates_dropped=dropped,
        tagged=sum(1 for article in annotated if article.tickers),
        selected=len(selected),
        duration_seconds=perf_counter() - started_at,
    )
    _log_stats("top_news", stats)
    return AggregationResult(articles=selected, stats=stats)


def aggregate_ai_news(
    *,
    feeds: Sequence[FeedSource],
    fetcher: FeedFetcher,
    limit: int = DEFAULT_AI_LIMIT,
) -> AggregationResult:
    """Collect AI-focused feeds, newest first, without symbol balancing."""
    if limit < 0:
        raise ValueError("limit must be >= 0")

    started_at = perf_counter()
    active_feeds = [feed for feed in feeds if feed.enabled]

    fetched = fetcher.fetch_all(active_feeds)
    unique, dropped = dedupe_by_title_and_link(fetched)
    ordered = sorted(unique, key=lambda article: article.published_at or _EPOCH, reverse=True)
    selected = ordered[:limit]

    stats = AggregationStats(
        feeds=len(active_feeds),
        fetched=len(fetched),
        unique=len(unique),
        duplicates_dropped=dropped,
        tagged=0,
        selected=len(selected),
        duration_seconds=perf_counter() - started_at,
    )
    _log_stats("ai_news", stats)
    return AggregationResult(articles=selected, stats=stats)


def render_article_table(articles: Sequence[Article]) -> str:
    if not articles:
        return "no stories available"

    headers = ("rank", "source", "published", "tickers", "title")
    line_rows = [
        (
            str(index),
            _truncate(article.source or "-", limit=24),
            article.published_at.strftime("%Y-%m-%d %H:%M") if article.published_at else "-",
            _truncate(",".join(article.tickers) or "-", limit=24),
            _truncate(article.title or article.link, limit=72),
        )
        for index, article in enumerate(articles, start=1)
    ]
    return _render_table(headers=headers, rows=line_rows)


def _log_stats(name: str, stats: AggregationStats) -> None:
    logger.info(
        (
            "%s_stats feeds=%d fetched=%d unique=%d duplicates_dropped=%d "
            "tagged=%d selected=%d duration=%.3fs"
        ),
        name,
        stats.feeds,
        stats.fetched,
        stats.unique,
        stats.duplicates_dropped,
        stats.tagged,
        stats.selected,
        stats.duration_seconds,
    )


def _render_table(
    *,
    headers: tuple[str, ...],
    rows: list[tuple[str, ...]],
) -> str:
    widths = [
        max(len(headers[column]), *(len(row[column]) for row in rows))
        for column in range(len(headers))
    ]

    def _line(values: tuple[str, ...]) -> str:
        return " | ".join(
            value.ljust(widths[index]) for index, value in enumerate(values)
        )

    divider = "-+-".join("-" * width for width in widths)
    body = [_line(headers), divider]
    body.extend(_line(row) for row in rows)
    return "\n".join(body)


def _truncate(text: str, *, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[: limit - 3]}..."
