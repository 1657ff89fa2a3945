"""
Request-level orchestration: cache lookup, upstream fetch, aggregation.

`NewsService.aggregate_news` is the boundary of the core. Everything below it
raises typed errors; this layer converts them into ErrorResult values so no
failure escapes to the caller as an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

import httpx

from .cache import ResultCache, cache_key, normalize_query
from .config import AppConfig, get_api_key
from .core.pipeline import AggregationPolicy, aggregate
from .core.types import BROWSE, SEARCH, AggregatedResult, ErrorResult, Mode
from .errors import ConfigurationError, NewsFeedError, ValidationError
from .fetcher import fetch_page
from .logging_utils import log_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewsRequest:
    """Inbound request.

    Attributes:
        query: Search text; blank or shorter than the minimum means browse mode
        page_token: `next_page_token` from a previous result
    """

    query: str | None = None
    page_token: str | None = None


def resolve_mode(query: str | None, min_query_length: int = 2) -> tuple[Mode, str | None]:
    """Decide between browse and search mode.

    Returns:
        ("search", trimmed_query) when the trimmed query is long enough,
        otherwise ("browse", None)
    """
    trimmed = (query or "").strip()
    if len(trimmed) >= min_query_length:
        return SEARCH, trimmed
    return BROWSE, None


def policy_from_config(cfg: AppConfig) -> AggregationPolicy:
    return AggregationPolicy(
        similarity_threshold=cfg.dedup.title_similarity_threshold,
        source_scoped=cfg.dedup.source_scoped,
        fuzzy_in_search=cfg.dedup.fuzzy_in_search,
        strict_keyword_filter=cfg.search.strict_keyword_filter,
        max_results=cfg.pipeline.max_results,
    )


class NewsService:
    """Serves aggregated pages, memoized per (mode, query, page).

    Args:
        cfg: Application configuration
        cache: Shared result cache; one is created from cfg.cache when omitted
        client: Optional httpx client passed through to the upstream fetch
    """

    def __init__(
        self,
        cfg: AppConfig | None = None,
        cache: ResultCache | None = None,
        client: httpx.Client | None = None,
    ):
        self.cfg = cfg or AppConfig()
        self.cache = cache if cache is not None else ResultCache(
            default_ttl=self.cfg.cache.ttl_seconds,
            enabled=self.cfg.cache.enabled,
        )
        self.client = client
        self.policy = policy_from_config(self.cfg)

    def aggregate_news(self, request: NewsRequest) -> AggregatedResult | ErrorResult:
        try:
            return self._aggregate(request)
        except NewsFeedError as exc:
            log_event(
                logger,
                "Aggregation failed",
                event="aggregate_failed",
                kind=type(exc).__name__,
                status=exc.status,
                error=exc.message,
            )
            return exc.to_result()

    def _aggregate(self, request: NewsRequest) -> AggregatedResult:
        _validate_request(request)
        mode, query = resolve_mode(request.query, self.cfg.search.min_query_length)
        key = cache_key(mode, query, request.page_token)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        api_key = get_api_key(self.cfg.upstream)
        if not api_key:
            raise ConfigurationError(details=f"Set {self.cfg.upstream.api_key_env} or upstream.api_key")

        page = fetch_page(
            self.cfg.upstream,
            api_key,
            query=query,
            page_token=request.page_token,
            client=self.client,
        )
        articles = aggregate(
            page.results,
            mode,
            query=normalize_query(query),
            policy=self.policy,
        )
        result = AggregatedResult(articles=articles, next_page_token=page.next_page)
        self.cache.set(key, result)
        return result


def aggregate_news(
    request: NewsRequest | dict[str, Any],
    cfg: AppConfig | None = None,
    cache: ResultCache | None = None,
) -> AggregatedResult | ErrorResult:
    """One-shot convenience wrapper around NewsService.

    Accepts either a NewsRequest or a mapping with `query` / `page` keys.
    """
    if isinstance(request, dict):
        request = NewsRequest(query=request.get("query"), page_token=request.get("page"))
    return NewsService(cfg, cache).aggregate_news(request)


def _validate_request(request: NewsRequest) -> None:
    if request.query is not None and not isinstance(request.query, str):
        raise ValidationError("Query must be a string")
    if request.page_token is not None:
        if not isinstance(request.page_token, str) or not request.page_token.strip():
            raise ValidationError("Page token must be a non-empty string")
