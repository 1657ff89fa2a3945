"""
Aggregation pipeline for one upstream page.

Stages run in a fixed order:
1. Validate raw items into Articles (invalid items are dropped)
2. Sort by published time, newest first (stable for ties)
3. Exact dedupe by identity key
4. Keyword filter (search mode with strict filtering only)
5. Fuzzy near-duplicate suppression (browse mode, and search mode when enabled)
6. Optional cap on the number of results

An empty final list raises NoResultsError rather than returning [].
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Iterable

from ..errors import NoResultsError
from ..logging_utils import log_event
from .dedup import DEFAULT_SIMILARITY_THRESHOLD, dedup_exact, dedup_fuzzy
from .types import BROWSE, SEARCH, Article, Mode, parse_raw_article

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationPolicy:
    """Dedupe and filtering choices for the pipeline.

    Attributes:
        similarity_threshold: Title Jaccard similarity (inclusive) treated as duplicate
        source_scoped: Fuzzy matches only count between articles of the same source
        fuzzy_in_search: Apply fuzzy suppression to search results as well
        strict_keyword_filter: In search mode, require every query term in title+description
        max_results: Keep at most this many articles, None for no limit
        default_source_id: Source id assumed for raw items that carry none
    """

    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    source_scoped: bool = True
    fuzzy_in_search: bool = True
    strict_keyword_filter: bool = False
    max_results: int | None = None
    default_source_id: str | None = None


DEFAULT_POLICY = AggregationPolicy()


def validate_items(raw_items: Iterable[Any], default_source_id: str | None = None) -> list[Article]:
    articles: list[Article] = []
    for item in raw_items:
        article = parse_raw_article(item, default_source_id=default_source_id)
        if article is not None:
            articles.append(article)
    return articles


def sort_newest_first(articles: list[Article]) -> list[Article]:
    # sorted() is stable with reverse=True, so ties keep input order
    return sorted(articles, key=lambda article: article.published_at, reverse=True)


def matches_keywords(article: Article, query: str) -> bool:
    """Strict AND substring match of every query term against title + description."""
    terms = query.lower().split()
    haystack = f"{article.title} {article.description or ''}".lower()
    return all(term in haystack for term in terms)


def aggregate(
    raw_items: Iterable[Any],
    mode: Mode = BROWSE,
    source_scoped_fuzzy_match: bool | None = None,
    *,
    query: str | None = None,
    policy: AggregationPolicy = DEFAULT_POLICY,
) -> list[Article]:
    """Turn a raw upstream batch into a clean, ordered list of articles.

    Args:
        raw_items: The upstream `results` array
        mode: "browse" or "search"
        source_scoped_fuzzy_match: Overrides `policy.source_scoped` when given
        query: Search query, used by the strict keyword filter
        policy: Dedupe and filtering configuration

    Returns:
        Articles sorted newest first with unique identity keys

    Raises:
        NoResultsError: If nothing survives validation and filtering
        ValueError: If mode is not "browse" or "search"
    """
    if mode not in (BROWSE, SEARCH):
        raise ValueError(f"Unsupported mode: {mode}")
    source_scoped = policy.source_scoped if source_scoped_fuzzy_match is None else source_scoped_fuzzy_match

    raw_list = list(raw_items)
    articles = validate_items(raw_list, default_source_id=policy.default_source_id)
    validated = len(articles)

    articles = dedup_exact(sort_newest_first(articles))
    exact_deduped = len(articles)

    if mode == SEARCH and policy.strict_keyword_filter and query:
        articles = [article for article in articles if matches_keywords(article, query)]
    keyword_matched = len(articles)

    if mode == BROWSE or policy.fuzzy_in_search:
        articles = dedup_fuzzy(articles, policy.similarity_threshold, source_scoped)
    fuzzy_deduped = len(articles)

    if policy.max_results is not None:
        articles = articles[: policy.max_results]

    log_event(
        logger,
        "Aggregation complete",
        event="aggregate",
        mode=mode,
        raw=len(raw_list),
        validated=validated,
        exact_deduped=exact_deduped,
        keyword_matched=keyword_matched,
        fuzzy_deduped=fuzzy_deduped,
        returned=len(articles),
    )

    if not articles:
        raise NoResultsError()
    return articles
