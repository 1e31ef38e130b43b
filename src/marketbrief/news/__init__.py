"""Feed fetching, deduplication, ticker annotation and balanced selection."""

from .aliases import (
    CURATED_ALIASES,
    DEFAULT_SYMBOLS,
    build_alias_index,
    load_alias_table,
    normalize_symbols,
    parse_symbols,
    resolve_alias_table,
)
from .dedupe import dedupe_by_title, dedupe_by_title_and_link, normalize_title_for_dedupe
from .feed_fetcher import FeedFetcher
from .parser import ParsedFeedEntry, entry_from_feedparser, parse_rss_feed, strip_markup
from .selector import SelectionState, select_balanced
from .ticker_mapper import AliasMatcher, annotate_tickers, map_text_to_tickers

__all__ = [
    "CURATED_ALIASES",
    "DEFAULT_SYMBOLS",
    "AliasMatcher",
    "FeedFetcher",
    "ParsedFeedEntry",
    "SelectionState",
    "annotate_tickers",
    "build_alias_index",
    "dedupe_by_title",
    "dedupe_by_title_and_link",
    "entry_from_feedparser",
    "load_alias_table",
    "map_text_to_tickers",
    "normalize_symbols",
    "normalize_title_for_dedupe",
    "parse_rss_feed",
    "parse_symbols",
    "resolve_alias_table",
    "select_balanced",
    "strip_markup",
]
