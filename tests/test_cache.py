"""Tests for the TTL result cache."""

from datetime import datetime, timezone

from news_feed.cache import ResultCache, cache_key, normalize_query
from news_feed.core.types import AggregatedResult, Article


class _FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_cache_key_is_deterministic_and_normalized():
    assert cache_key("search", "  Climate   SUMMIT ", "tok") == cache_key("search", "climate summit", "tok")
    assert cache_key("browse", None, None) == "news:browse::first"
    assert cache_key("search", "ai", None) != cache_key("browse", None, None)
    assert cache_key("browse", None, "p2") != cache_key("browse", None, None)


def test_normalize_query_handles_missing():
    assert normalize_query(None) == ""
    assert normalize_query("   ") == ""


def test_get_returns_value_before_expiry():
    clock = _FakeClock()
    cache = ResultCache(default_ttl=600, clock=clock)
    result = AggregatedResult(next_page_token="abc")
    cache.set("k", result)

    clock.now += 599
    assert cache.get("k") == result


def test_expired_entry_is_a_miss_and_dropped():
    clock = _FakeClock()
    cache = ResultCache(default_ttl=600, clock=clock)
    cache.set("k", AggregatedResult())

    clock.now += 600
    assert cache.get("k") is None
    assert len(cache) == 0


def test_explicit_ttl_overrides_default():
    clock = _FakeClock()
    cache = ResultCache(default_ttl=600, clock=clock)
    cache.set("k", AggregatedResult(), ttl=5)

    clock.now += 10
    assert cache.get("k") is None


def test_last_writer_wins():
    cache = ResultCache()
    first = AggregatedResult(next_page_token="1")
    second = AggregatedResult(next_page_token="2")
    cache.set("k", first)
    cache.set("k", second)

    assert cache.get("k") == second


def test_disabled_cache_never_stores():
    cache = ResultCache(enabled=False)
    cache.set("k", AggregatedResult())

    assert cache.get("k") is None
    assert len(cache) == 0


def test_clear_empties_cache():
    cache = ResultCache()
    cache.set("a", AggregatedResult())
    cache.set("b", AggregatedResult())
    cache.clear()

    assert len(cache) == 0


def test_writes_purge_expired_entries_for_other_keys():
    clock = _FakeClock()
    cache = ResultCache(default_ttl=600, clock=clock)

    for i in range(1000):
        cache.set(f"news:browse::page-{i}", AggregatedResult())
        clock.now += 601
        assert len(cache) <= 1


def test_writes_keep_entries_that_are_still_fresh():
    clock = _FakeClock()
    cache = ResultCache(default_ttl=600, clock=clock)
    cache.set("old", AggregatedResult())
    clock.now += 300
    cache.set("young", AggregatedResult())
    clock.now += 301
    cache.set("new", AggregatedResult())

    assert len(cache) == 2
    assert cache.get("old") is None
    assert cache.get("young") is not None


def test_mutating_a_returned_result_does_not_touch_the_cache():
    article = Article(
        provider_id="a1",
        title="Story",
        source_id="bbc",
        published_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        link="https://example.com/a1",
    )
    cache = ResultCache()
    original = AggregatedResult(articles=[article], next_page_token="p2")
    cache.set("k", original)

    original.articles.clear()
    hit = cache.get("k")
    hit.articles.append(article)
    hit.next_page_token = "changed"

    again = cache.get("k")
    assert again.articles == [article]
    assert again.next_page_token == "p2"
