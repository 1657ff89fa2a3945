"""
News Feed - aggregation, deduplication and incremental merging of news pages.

This package fetches pages from an upstream news API, validates, sorts and
deduplicates them (exactly by identity key and fuzzily by title), caches the
result, and merges successive pages into a client-held accumulation that
tracks newly arrived articles.

Main entry point is the CLI via `news-feed latest` / `news-feed search`.

Example:
    $ news-feed search "climate summit"
"""

__all__ = [
    "__version__",
    "AggregatedResult",
    "Article",
    "ErrorResult",
    "MergeStore",
    "NewsRequest",
    "NewsService",
    "NewsSession",
    "aggregate",
    "aggregate_news",
]
__version__ = "0.1.0"

from .core.pipeline import aggregate
from .core.store import MergeStore
from .core.types import AggregatedResult, Article, ErrorResult
from .service import NewsRequest, NewsService, aggregate_news
from .session import NewsSession
