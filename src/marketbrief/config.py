from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from marketbrief.news.aliases import DEFAULT_SYMBOLS
from marketbrief.schemas import FeedSource

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/127 Safari/537.36"
)

DEFAULT_BUSINESS_FEEDS = (
    {
        "name": "Google News - Business",
        "url": "https://news.google.com/rss/headlines/section/topic/BUSINESS?hl=en-US&gl=US&ceid=US:en",
    },
    {"name": "Reuters", "url": "https://feeds.reuters.com/reuters/businessNews"},
    {"name": "MarketWatch", "url": "https://feeds.marketwatch.com/marketwatch/topstories/"},
    {"name": "CNBC", "url": "https://www.cnbc.com/id/10001147/device/rss/rss.html"},
    {"name": "WSJ Markets", "url": "https://feeds.a.dj.com/rss/RSSMarketsMain.xml"},
)

DEFAULT_AI_FEEDS = (
    {
        "name": "Google News - AI",
        "url": (
            "https://news.google.com/rss/search?q=%28artificial%20intelligence%20OR%20AI"
            "%20OR%20machine%20learning%20OR%20genAI%20OR%20LLM%20OR%20OpenAI"
            "%20OR%20Anthropic%20OR%20DeepMind%20OR%20Mistral%29&hl=en-US&gl=US&ceid=US:en"
        ),
    },
    {"name": "MIT Tech Review - AI", "url": "https://www.technologyreview.com/topic/ai/feed/"},
    {"name": "VentureBeat - AI", "url": "https://venturebeat.com/category/ai/feed/"},
)


class FetchConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    timeout_seconds: float = Field(default=7.0, gt=0.0)
    max_items_per_feed: int = Field(default=5, ge=1)
    max_workers: int = Field(default=8, ge=1)
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("user_agent")
    @classmethod
    def validate_user_agent(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("fetch.user_agent must not be empty")
        return normalized


class SelectionConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    target: int = Field(default=12, ge=0)
    max_per_symbol: int = Field(default=2, ge=1)


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    feeds: list[FeedSource] = Field(
        default_factory=lambda: [FeedSource(**feed) for feed in DEFAULT_BUSINESS_FEEDS]
    )
    ai_feeds: list[FeedSource] = Field(
        default_factory=lambda: [FeedSource(**feed) for feed in DEFAULT_AI_FEEDS]
    )
    symbols: list[str] = Field(default_factory=lambda: list(DEFAULT_SYMBOLS))
    alias_map_path: str | None = None
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)

    @field_validator("symbols")
    @classmethod
    def validate_symbols(cls, value: list[str]) -> list[str]:
        return [symbol.strip().upper() for symbol in value if symbol.strip()]

    @field_validator("alias_map_path")
    @classmethod
    def validate_alias_map_path(cls, value: str | None) -> str | None:
        if value is None:
            return None
        normalized = value.strip()
        return normalized or None

    @model_validator(mode="after")
    def validate_unique_feed_names(self) -> AppConfig:
        for field_name in ("feeds", "ai_feeds"):
            names = [feed.name for feed in getattr(self, field_name)]
            if len(names) != len(set(names)):
                raise ValueError(f"{field_name}[].name must be unique")
        return self

    @property
    def enabled_feeds(self) -> list[FeedSource]:
        return [feed for feed in self.feeds if feed.enabled]

    @property
    def enabled_ai_feeds(self) -> list[FeedSource]:
        return [feed for feed in self.ai_feeds if feed.enabled]


def load_config(path: str | Path) -> AppConfig:
    raw = Path(path).read_text(encoding="utf-8")
    payload = _parse_yaml_or_json(raw)
    try:
        return AppConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def _parse_yaml_or_json(raw: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        parsed = _parse_yaml(raw)
    if not isinstance(parsed, dict):
        raise ValueError("Configuration root must be an object.")
    return parsed


def _parse_yaml(raw: str) -> dict[str, Any]:
    import yaml

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Configuration root must be an object.")
    return parsed
