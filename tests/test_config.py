"""Tests for YAML configuration loading."""

from pathlib import Path

from news_feed.config import AppConfig, UpstreamConfig, get_api_key, load_config


def test_defaults_without_path():
    cfg = load_config(None)

    assert cfg.upstream.timeout_seconds == 5.0
    assert cfg.cache.ttl_seconds == 600.0
    assert cfg.dedup.title_similarity_threshold == 0.75
    assert cfg.dedup.source_scoped is True
    assert cfg.dedup.fuzzy_in_search is True
    assert cfg.search.min_query_length == 2
    assert cfg.pipeline.max_results == 10


def test_yaml_overrides_merge_with_defaults(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "upstream:\n"
        "  timeout_seconds: 2.5\n"
        "dedup:\n"
        "  source_scoped: false\n"
        "pipeline:\n"
        "  max_results: null\n"
        "unknown_section:\n"
        "  foo: bar\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.upstream.timeout_seconds == 2.5
    assert cfg.upstream.language == "en"
    assert cfg.dedup.source_scoped is False
    assert cfg.dedup.title_similarity_threshold == 0.75
    assert cfg.pipeline.max_results is None


def test_empty_yaml_gives_defaults(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(str(path)) == AppConfig()


def test_load_config_does_not_share_state_between_calls():
    first = load_config(None)
    first.upstream.api_key = "changed"

    assert load_config(None).upstream.api_key is None


def test_get_api_key_prefers_inline(monkeypatch):
    monkeypatch.setenv("NEWS_API_KEY", "from-env")

    assert get_api_key(UpstreamConfig(api_key="inline")) == "inline"
    assert get_api_key(UpstreamConfig()) == "from-env"


def test_get_api_key_custom_env_name(monkeypatch):
    monkeypatch.setenv("OTHER_KEY", "other")

    assert get_api_key(UpstreamConfig(api_key_env="OTHER_KEY")) == "other"
