"""
Core domain models and business logic.

This package contains the article types, similarity scoring, deduplication,
the aggregation pipeline and the client-side merge store. None of it
performs I/O.
"""

from .types import AggregatedResult, Article, ErrorResult, identity_key, parse_raw_article
from .similarity import jaccard, title_similarity, tokenize_title
from .dedup import dedup_exact, dedup_fuzzy
from .pipeline import AggregationPolicy, aggregate
from .store import AccumulatedState, MergeStore

__all__ = [
    "Article",
    "AggregatedResult",
    "ErrorResult",
    "identity_key",
    "parse_raw_article",
    "tokenize_title",
    "jaccard",
    "title_similarity",
    "dedup_exact",
    "dedup_fuzzy",
    "AggregationPolicy",
    "aggregate",
    "AccumulatedState",
    "MergeStore",
]
