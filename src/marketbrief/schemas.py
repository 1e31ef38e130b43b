from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _normalize_datetime(value: datetime) -> datetime:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DTOBase(BaseModel):
    model_config = ConfigDict(extra="forbid")


class FeedSource(DTOBase):
    name: str
    url: str
    enabled: bool = True

    @field_validator("name", "url")
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("feed name and url must not be empty")
        return normalized


class Article(DTOBase):
    title: str = ""
    link: str = ""
    published_at: datetime | None = None
    summary: str = ""
    source: str = ""
    tickers: list[str] = Field(default_factory=list)

    @field_validator("published_at", mode="after")
    @classmethod
    def validate_published_at(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        return _normalize_datetime(value)

    def identity_key(self) -> str:
        return (self.link or self.title).casefold()

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "pubDate": self.published_at.isoformat() if self.published_at else None,
            "description": self.summary,
            "source": self.source,
            "tickers": list(self.tickers),
        }
