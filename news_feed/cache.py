"""
In-memory TTL cache for aggregated pages.

An expired entry is treated as a miss and dropped on the next read of its
key; every write also purges all expired entries so the cache stays bounded
by the keys written within one TTL window. Writes to an existing key
overwrite it (last writer wins).
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from .core.types import AggregatedResult, Mode
from .logging_utils import log_event

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 600.0


def normalize_query(query: str | None) -> str:
    """Trim, lowercase and collapse whitespace so equivalent queries share a key."""
    if not query:
        return ""
    return " ".join(query.lower().split())


def cache_key(mode: Mode, query: str | None, page_token: str | None) -> str:
    """Build the deterministic key for one (mode, query, page) combination.

    Examples:
        >>> cache_key("browse", None, None)
        'news:browse::first'
        >>> cache_key("search", "  Climate  Summit ", "abc123")
        'news:search:climate summit:abc123'
    """
    return f"news:{mode}:{normalize_query(query)}:{page_token or 'first'}"


class ResultCache:
    """Thread-safe TTL cache of AggregatedResult values.

    Values are copied on the way in and out, so callers cannot mutate a
    cached page through a returned result.

    Attributes:
        default_ttl: TTL in seconds used when set() is called without one
        enabled: When False, get() always misses and set() is a no-op
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self.enabled = enabled
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[AggregatedResult, float]] = {}

    def get(self, key: str) -> AggregatedResult | None:
        if not self.enabled:
            return None
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                value, expires_at = entry
                if self._clock() < expires_at:
                    log_event(logger, "Cache hit", event="cache_hit", key=key)
                    return _copy(value)
                del self._entries[key]
        log_event(logger, "Cache miss", event="cache_miss", key=key)
        return None

    def set(self, key: str, value: AggregatedResult, ttl: float | None = None) -> None:
        if not self.enabled:
            return
        ttl = self.default_ttl if ttl is None else ttl
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._entries[key] = (_copy(value), now + ttl)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _purge_expired(self, now: float) -> None:
        # caller holds the lock
        expired = [key for key, (_, expires_at) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            log_event(logger, "Cache purge", event="cache_purge", removed=len(expired))


def _copy(result: AggregatedResult) -> AggregatedResult:
    return AggregatedResult(articles=list(result.articles), next_page_token=result.next_page_token)
