"""Aggregation orchestration for one request."""

from .run import (
    AggregationResult,
    AggregationStats,
    aggregate_ai_news,
    aggregate_top_news,
    render_article_table,
)

__all__ = [
    "AggregationResult",
    "AggregationStats",
    "aggregate_ai_news",
    "aggregate_top_news",
    "render_article_table",
]
