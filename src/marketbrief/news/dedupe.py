from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TypeVar

from marketbrief.schemas import Article

_T = TypeVar("_T")


def normalize_title_for_dedupe(title: str) -> str:
    return (title or "").strip().casefold()


def dedupe_by_title(articles: Iterable[Article]) -> tuple[list[Article], int]:
    """Drop repeated headlines across feeds, keeping the first occurrence.

    Untitled articles never collide with each other.
    """
    return dedupe_exact(
        articles,
        get_key=lambda article: normalize_title_for_dedupe(article.title),
    )


def dedupe_by_title_and_link(articles: Iterable[Article]) -> tuple[list[Article], int]:
    return dedupe_exact(
        articles,
        get_key=lambda article: f"{article.title}|{article.link}".strip().casefold(),
    )


def dedupe_exact(
    items: Iterable[_T],
    *,
    get_key: Callable[[_T], str],
) -> tuple[list[_T], int]:
    seen_keys: set[str] = set()
    unique: list[_T] = []
    dropped = 0

    for item in items:
        key = get_key(item)
        if not key:
            unique.append(item)
            continue
        if key in seen_keys:
            dropped += 1
            continue
        seen_keys.add(key)
        unique.append(item)
    return unique, dropped
