from __future__ import annotations

import calendar
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any
from xml.etree import ElementTree

from bs4 import BeautifulSoup

_WHITESPACE_PATTERN = re.compile(r"\s+")
_MARKUP_HINT_PATTERN = re.compile(r"<[a-zA-Z/!][^>]*>|&[#a-zA-Z0-9]+;")


@dataclass(slots=True)
class ParsedFeedEntry:
    url: str
    title: str
    summary: str
    published_at: datetime | None


def parse_rss_feed(xml: str | bytes) -> list[ParsedFeedEntry]:
    """Parse RSS 2.0 ``item`` or Atom ``entry`` elements from raw XML.

    Entries with neither a title nor a link are skipped; a missing or
    unreadable date leaves ``published_at`` unset.
    """
    try:
        root = ElementTree.fromstring(xml)
    except ElementTree.ParseError:
        return []

    parsed: list[ParsedFeedEntry] = []
    items = _find_elements_by_local_name(root, "item")
    if items:
        for item in items:
            title = strip_markup(_first_child_text(item, ["title"]))
            link = _extract_rss_link(item)
            published_at = parse_published_at(
                _first_child_text(item, ["pubDate", "published", "updated", "date"])
            )
            summary = strip_markup(
                _first_child_text(item, ["description", "summary", "content", "encoded"])
            )
            if not title and not link:
                continue
            parsed.append(
                ParsedFeedEntry(url=link, title=title, summary=summary, published_at=published_at)
            )
        return parsed

    for entry in _find_elements_by_local_name(root, "entry"):
        title = strip_markup(_first_child_text(entry, ["title"]))
        link = _extract_atom_link(entry)
        published_at = parse_published_at(
            _first_child_text(entry, ["published", "updated", "date"])
        )
        summary = strip_markup(_first_child_text(entry, ["summary", "content"]))
        if not title and not link:
            continue
        parsed.append(
            ParsedFeedEntry(url=link, title=title, summary=summary, published_at=published_at)
        )
    return parsed


def entry_from_feedparser(entry: Mapping[str, Any]) -> ParsedFeedEntry | None:
    title = strip_markup(str(entry.get("title") or ""))
    link = _normalize_text(str(entry.get("link") or ""))
    if not title and not link:
        return None

    return ParsedFeedEntry(
        url=link,
        title=title,
        summary=strip_markup(_feedparser_summary(entry)),
        published_at=_feedparser_published_at(entry),
    )


def strip_markup(text: str) -> str:
    if not text:
        return ""
    if _MARKUP_HINT_PATTERN.search(text) is None:
        return _normalize_text(text)
    soup = BeautifulSoup(text, "html.parser")
    return _normalize_text(soup.get_text(" ", strip=True))


def parse_published_at(text: str) -> datetime | None:
    cleaned = (text or "").strip()
    if not cleaned:
        return None

    try:
        parsed = parsedate_to_datetime(cleaned)
    except (TypeError, ValueError):
        parsed = None
    if parsed is None:
        iso_text = cleaned.replace("Z", "+00:00")
        try:
            parsed = datetime.fromisoformat(iso_text)
        except ValueError:
            return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _feedparser_summary(entry: Mapping[str, Any]) -> str:
    for key in ("summary", "description"):
        value = entry.get(key)
        if isinstance(value, str) and value.strip():
            return value

    for block in entry.get("content") or []:
        value = block.get("value") if isinstance(block, Mapping) else None
        if isinstance(value, str) and value.strip():
            return value
    return ""


def _feedparser_published_at(entry: Mapping[str, Any]) -> datetime | None:
    for key in ("published", "updated"):
        parsed = parse_published_at(str(entry.get(key) or ""))
        if parsed is not None:
            return parsed

    for key in ("published_parsed", "updated_parsed"):
        struct = entry.get(key)
        if struct:
            return datetime.fromtimestamp(calendar.timegm(struct), tz=timezone.utc)
    return None


def _extract_rss_link(node: ElementTree.Element) -> str:
    for tag_name in ("link", "guid"):
        for child in node:
            if _local_name(child.tag) != tag_name:
                continue
            href = (child.attrib.get("href") or "").strip()
            if href:
                return href
            text = _normalize_text("".join(child.itertext()))
            if text:
                return text
    return ""


def _extract_atom_link(node: ElementTree.Element) -> str:
    links = [child for child in node if _local_name(child.tag) == "link"]
    for link in links:
        rel = (link.attrib.get("rel") or "").strip().lower()
        href = (link.attrib.get("href") or "").strip()
        if href and rel in {"", "alternate"}:
            return href

    if not links:
        return ""

    first_link = links[0]
    href = (first_link.attrib.get("href") or "").strip()
    if href:
        return href
    return _normalize_text("".join(first_link.itertext()))


def _normalize_text(text: str) -> str:
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def _find_elements_by_local_name(
    node: ElementTree.Element, name: str
) -> list[ElementTree.Element]:
    return [element for element in node.iter() if _local_name(element.tag) == name]


def _first_child_text(node: ElementTree.Element, names: list[str]) -> str:
    for name in names:
        target = name.lower()
        for child in node:
            if _local_name(child.tag).lower() != target:
                continue
            text = "".join(child.itertext())
            if text.strip():
                return text
    return ""


def _local_name(tag: str) -> str:
    if "}" in tag:
        return tag.rsplit("}", maxsplit=1)[-1]
    if ":" in tag:
        return tag.rsplit(":", maxsplit=1)[-1]
    return tag
