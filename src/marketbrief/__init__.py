"""marketbrief: symbol-balanced business news aggregation."""

from .config import AppConfig, load_config
from .schemas import Article, FeedSource

__all__ = [
    "AppConfig",
    "Article",
    "FeedSource",
    "load_config",
]
