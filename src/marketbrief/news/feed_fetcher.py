from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager

import feedparser
import requests

from marketbrief.schemas import Article, FeedSource

from .parser import ParsedFeedEntry, entry_from_feedparser, parse_rss_feed

logger = logging.getLogger(__name__)

FEED_ACCEPT = "application/rss+xml, application/xml;q=0.9, */*;q=0.8"
DEFAULT_TIMEOUT_SECONDS = 7.0
DEFAULT_MAX_ITEMS_PER_FEED = 5


class FeedFetcher:
    """Fetch syndication feeds into normalized articles.

    A feed that errors, times out or cannot be parsed contributes no
    articles; nothing raised while fetching a feed reaches the caller.
    """

    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_items_per_feed: int = DEFAULT_MAX_ITEMS_PER_FEED,
        max_workers: int = 8,
        user_agent: str = "marketbrief/0.1.0",
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if max_items_per_feed < 1:
            raise ValueError("max_items_per_feed must be >= 1")
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        self.session = session
        self.timeout_seconds = timeout_seconds
        self.max_items_per_feed = max_items_per_feed
        self.max_workers = max_workers
        self.headers = {"User-Agent": user_agent, "Accept": FEED_ACCEPT}

    def fetch(self, source: FeedSource) -> list[Article]:
        with self._open_session() as session:
            entries = self._fetch_structured(session, source)
            if not entries:
                entries = self._fetch_raw(session, source)

        articles = [
            Article(
                title=entry.title,
                link=entry.url,
                published_at=entry.published_at,
                summary=entry.summary,
                source=source.name,
            )
            for entry in entries[: self.max_items_per_feed]
        ]
        logger.info("feed fetched source=%s articles=%d", source.name, len(articles))
        return articles

    def fetch_all(self, sources: Sequence[FeedSource]) -> list[Article]:
        """Fetch every source concurrently and concatenate in source order."""
        if not sources:
            return []

        workers = min(self.max_workers, len(sources))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="feed") as executor:
            futures = [executor.submit(self.fetch, source) for source in sources]

        collected: list[Article] = []
        for source, future in zip(sources, futures):
            try:
                collected.extend(future.result())
            except Exception:
                logger.exception("feed fetch crashed source=%s url=%s", source.name, source.url)
        return collected

    def _fetch_structured(
        self, session: requests.Session, source: FeedSource
    ) -> list[ParsedFeedEntry]:
        try:
            response = session.get(
                source.url,
                timeout=self.timeout_seconds,
                headers=self.headers,
            )
            response.raise_for_status()
            parsed = feedparser.parse(response.content)
            if parsed.get("bozo") and not parsed.get("entries"):
                raise ValueError(f"malformed feed: {parsed.get('bozo_exception')}")
            entries = [entry_from_feedparser(entry) for entry in parsed.get("entries", [])]
        except Exception:
            logger.warning(
                "structured feed parse failed source=%s url=%s",
                source.name,
                source.url,
                exc_info=True,
            )
            return []
        return [entry for entry in entries if entry is not None]

    def _fetch_raw(
        self, session: requests.Session, source: FeedSource
    ) -> list[ParsedFeedEntry]:
        try:
            response = session.get(
                source.url,
                timeout=self.timeout_seconds,
                headers=self.headers,
                allow_redirects=True,
            )
            response.raise_for_status()
            entries = parse_rss_feed(response.content)
        except Exception:
            logger.warning(
                "raw feed fallback failed source=%s url=%s",
                source.name,
                source.url,
                exc_info=True,
            )
            return []
        if not entries:
            logger.warning("feed yielded no entries source=%s url=%s", source.name, source.url)
        return entries

    @contextmanager
    def _open_session(self) -> Iterator[requests.Session]:
        if self.session is not None:
            yield self.session
            return
        with requests.Session() as session:
            yield session
