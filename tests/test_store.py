"""Tests for the incremental merge store."""

from datetime import datetime, timedelta, timezone

from news_feed.core.store import MergeStore
from news_feed.core.types import AggregatedResult, Article

_BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _article(key: str, hours: int = 0, provider_id: str | None = "use-key") -> Article:
    return Article(
        provider_id=key if provider_id == "use-key" else provider_id,
        title=f"Story {key}",
        source_id="bbc",
        published_at=_BASE + timedelta(hours=hours),
        link=f"https://example.com/{key}",
    )


def _page(*articles: Article, next_page: str | None = None) -> AggregatedResult:
    return AggregatedResult(articles=list(articles), next_page_token=next_page)


def _ids(store: MergeStore) -> list[str]:
    return [a.id for a in store.articles]


def test_merge_next_page_prepends_only_new_articles():
    x, y, z = _article("X"), _article("Y"), _article("Z")
    store = MergeStore()
    store.hydrate(_page(x, y))

    added = store.merge_next_page(_page(y, z))

    assert added == [z]
    assert _ids(store) == ["Z", "X", "Y"]
    assert store.new_ids == {"Z"}


def test_merge_next_page_twice_is_idempotent():
    store = MergeStore()
    store.hydrate(_page(_article("A")))
    page = _page(_article("B"), _article("C"))

    store.merge_next_page(page)
    after_first = _ids(store)
    store.merge_next_page(page)

    assert _ids(store) == after_first == ["B", "C", "A"]
    assert store.new_ids == set()


def test_new_markers_are_not_cumulative():
    store = MergeStore()
    store.hydrate(_page(_article("A")))
    store.merge_next_page(_page(_article("B")))
    store.merge_next_page(_page(_article("C")))

    assert store.new_ids == {"C"}


def test_browse_hydrate_marks_incoming_and_prepends():
    store = MergeStore()
    store.hydrate(_page(_article("A"), _article("B")))
    assert store.new_ids == {"A", "B"}

    store.hydrate(_page(_article("C"), _article("A")))

    assert _ids(store) == ["C", "A", "B"]
    assert store.new_ids == {"C"}


def test_browse_hydrate_twice_changes_nothing():
    store = MergeStore()
    page = _page(_article("A"), _article("B"))
    store.hydrate(page)
    articles_before = store.articles
    new_before = store.new_ids

    store.hydrate(page)

    assert store.articles == articles_before
    assert store.new_ids == new_before


def test_search_hydrate_replaces_accumulation():
    store = MergeStore()
    store.hydrate(_page(_article("A"), _article("B")))

    store.hydrate(_page(_article("S1"), _article("S2"), _article("S1")), is_search_mode=True)

    assert _ids(store) == ["S1", "S2"]
    assert store.new_ids == {"S1", "S2"}


def test_empty_and_missing_input_is_a_noop():
    store = MergeStore()
    store.hydrate(_page(_article("A")))

    assert store.merge_next_page(None) == []
    assert store.merge_next_page(_page()) == []
    assert store.hydrate(None) == []
    assert _ids(store) == ["A"]


def test_clear_new_markers_keeps_articles():
    store = MergeStore()
    store.hydrate(_page(_article("A")))

    store.clear_new_markers()

    assert _ids(store) == ["A"]
    assert store.new_ids == set()


def test_identity_falls_back_to_link_across_merges():
    store = MergeStore()
    store.hydrate(_page(_article("A", provider_id=None)))

    store.merge_next_page(_page(_article("A", provider_id=None), _article("B", provider_id=None)))

    assert _ids(store) == ["https://example.com/B", "https://example.com/A"]


def test_identity_uniqueness_and_new_ids_subset_after_many_operations():
    store = MergeStore()
    pages = [
        _page(_article("A"), _article("B")),
        _page(_article("B"), _article("C"), _article("C")),
        _page(_article("A"), _article("D")),
        _page(),
    ]
    for i, page in enumerate(pages):
        if i % 2:
            store.merge_next_page(page)
        else:
            store.hydrate(page)
        ids = _ids(store)
        assert len(ids) == len(set(ids))
        assert store.new_ids <= set(ids)

    assert sorted(_ids(store)) == ["A", "B", "C", "D"]
