"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- UpstreamConfig: News provider endpoint, credentials and timeout
- DedupConfig: Fuzzy deduplication policy
- SearchConfig: Search mode activation and keyword filtering
- PipelineConfig: Result size limits
- CacheConfig: In-memory result cache settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from typing import Any

import yaml


@dataclass
class UpstreamConfig:
    """Configuration for the upstream news provider.

    Attributes:
        base_url: Endpoint returning `{results: [...], nextPage: ...}`
        language: Language filter sent with every request
        api_key_env: Environment variable name containing the API key
        api_key: Optional inline API key (overrides env var)
        timeout_seconds: Abort the request after this many seconds
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
    """

    base_url: str = "https://newsdata.io/api/1/latest"
    language: str = "en"
    api_key_env: str = "NEWS_API_KEY"
    api_key: str | None = None
    timeout_seconds: float = 5.0
    trust_env: bool = True
    user_agent: str = "news-feed/0.1"


@dataclass
class DedupConfig:
    """Configuration for fuzzy title deduplication.

    Attributes:
        title_similarity_threshold: Jaccard similarity (0.0-1.0) at which titles are duplicates
        source_scoped: Only compare titles from the same source
        fuzzy_in_search: Also apply fuzzy dedupe to search results
    """

    title_similarity_threshold: float = 0.75
    source_scoped: bool = True
    fuzzy_in_search: bool = True


@dataclass
class SearchConfig:
    """Configuration for search mode.

    Attributes:
        min_query_length: Trimmed queries shorter than this stay in browse mode
        strict_keyword_filter: Require every query term in title or description
    """

    min_query_length: int = 2
    strict_keyword_filter: bool = False


@dataclass
class PipelineConfig:
    max_results: int | None = 10


@dataclass
class CacheConfig:
    """Configuration for the aggregated result cache.

    Attributes:
        enabled: Whether to cache aggregated pages
        ttl_seconds: Time-to-live for cache entries
    """

    enabled: bool = True
    ttl_seconds: float = 600.0


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Path of the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "news_feed.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    dedup: DedupConfig = field(default_factory=DedupConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig.

    Unknown top-level sections are ignored; unknown keys inside a known
    section raise TypeError from the dataclass constructor.
    """
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        upstream=UpstreamConfig(**data["upstream"]),
        dedup=DedupConfig(**data["dedup"]),
        search=SearchConfig(**data["search"]),
        pipeline=PipelineConfig(**data["pipeline"]),
        cache=CacheConfig(**data["cache"]),
        logging=LoggingConfig(**data["logging"]),
    )


def get_api_key(cfg: UpstreamConfig) -> str | None:
    """Get API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)
