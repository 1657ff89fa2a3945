"""
Article deduplication by identity key and fuzzy title comparison.

This module removes duplicate articles in two independent passes:
1. Exact duplicates: articles sharing an identity key (provider id or link)
2. Near duplicates: articles whose titles are too similar to an article
   already kept, optionally only when both come from the same publisher

Both passes keep the first occurrence, so callers sort before deduplicating
when the most recent copy should win.
"""

from __future__ import annotations

from .similarity import jaccard, tokenize_title
from .types import Article

DEFAULT_SIMILARITY_THRESHOLD = 0.75


def dedup_exact(articles: list[Article]) -> list[Article]:
    """Remove articles whose identity key was already seen.

    Args:
        articles: Articles in priority order

    Returns:
        Articles with unique identity keys, preserving input order
    """
    seen_ids: set[str] = set()
    kept: list[Article] = []

    for article in articles:
        if article.id in seen_ids:
            continue
        seen_ids.add(article.id)
        kept.append(article)

    return kept


def dedup_fuzzy(
    articles: list[Article],
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    source_scoped: bool = True,
) -> list[Article]:
    """Suppress near-duplicate titles.

    Each candidate is compared against every article already kept. It is
    dropped when the Jaccard similarity of the title tokens reaches the
    threshold (inclusive) and, with `source_scoped`, the kept article has
    the same source_id. Earlier articles always win.

    Args:
        articles: Exact-deduplicated articles in priority order
        threshold: Similarity (0.0-1.0) at which titles count as duplicates
        source_scoped: Only treat titles from the same publisher as duplicates

    Returns:
        Articles with near duplicates removed, preserving input order
    """
    kept: list[Article] = []
    kept_tokens: list[set[str]] = []

    for article in articles:
        tokens = set(tokenize_title(article.title))
        if _is_near_duplicate(article, tokens, kept, kept_tokens, threshold, source_scoped):
            continue
        kept.append(article)
        kept_tokens.append(tokens)

    return kept


def _is_near_duplicate(
    article: Article,
    tokens: set[str],
    kept: list[Article],
    kept_tokens: list[set[str]],
    threshold: float,
    source_scoped: bool,
) -> bool:
    for existing, existing_tokens in zip(kept, kept_tokens):
        if source_scoped and existing.source_id != article.source_id:
            continue
        if jaccard(tokens, existing_tokens) >= threshold:
            return True
    return False
