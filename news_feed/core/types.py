"""
Core data types for the news feed aggregator.

This module defines the structures passed between the pipeline stages:
- Article: A validated news article with a resolved identity key
- AggregatedResult: One page of aggregated articles plus the upstream page token
- ErrorResult: Typed failure returned at the service boundary
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any, Literal

logger = logging.getLogger(__name__)

Mode = Literal["browse", "search"]
BROWSE: Mode = "browse"
SEARCH: Mode = "search"

# The upstream provider sends the literal string "null" when an article has no id.
_NULL_ID_SENTINEL = "null"

_REQUIRED_FIELDS = ("title", "source_id", "pubDate", "link")


@dataclass(frozen=True)
class Article:
    """A single validated news article.

    Attributes:
        provider_id: Upstream identifier, or None when the provider sent none
        title: The article headline
        source_id: Identifier of the originating publisher (e.g. "bbc")
        published_at: Publication time, always timezone-aware
        link: Absolute URL of the article
        image_url: Optional lead image URL
        description: Optional teaser text
    """

    provider_id: str | None
    title: str
    source_id: str
    published_at: datetime
    link: str
    image_url: str | None = None
    description: str | None = None

    @property
    def id(self) -> str:
        """Identity key: the provider id when present, otherwise the link."""
        return identity_key(self.provider_id, self.link)

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the upstream wire shape."""
        return {
            "article_id": self.provider_id,
            "title": self.title,
            "source_id": self.source_id,
            "pubDate": self.published_at.isoformat(),
            "link": self.link,
            "image_url": self.image_url,
            "description": self.description,
        }


@dataclass
class AggregatedResult:
    """One aggregated page.

    `next_page_token` is opaque and passed back verbatim on the next request;
    None means there are no further pages.
    """

    articles: list[Article] = field(default_factory=list)
    next_page_token: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [article.to_dict() for article in self.articles],
            "nextPage": self.next_page_token,
        }


@dataclass
class ErrorResult:
    """Failure surfaced to the caller instead of an AggregatedResult.

    Attributes:
        kind: Error class name, e.g. "UpstreamTimeoutError" or "NoResultsError"
        status: HTTP-like status code
        message: Human-readable summary
        details: Upstream-supplied detail text, when there was any
    """

    kind: str
    status: int
    message: str
    details: str | None = None

    @property
    def is_empty(self) -> bool:
        """True for the "no results" marker, which is not a failure."""
        return self.kind == "NoResultsError"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


def normalize_provider_id(value: Any) -> str | None:
    """Turn the upstream id field into an optional string.

    Missing values, empty strings and the "null" sentinel all become None.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text or text == _NULL_ID_SENTINEL:
        return None
    return text


def identity_key(provider_id: str | None, link: str) -> str:
    return provider_id if provider_id is not None else link


def parse_published_at(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, treating naive values as UTC.

    The provider uses both "2024-01-02T10:00:00Z" and "2024-01-02 10:00:00";
    bare dates are accepted too. Returns None when the value cannot be parsed.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_raw_article(item: dict[str, Any], default_source_id: str | None = None) -> Article | None:
    """Build an Article from one raw upstream item.

    Accepts the provider's field names (article_id, source_id, pubDate,
    image_url) as well as the camelCase aliases used by cached payloads.

    Args:
        item: One element of the upstream `results` array
        default_source_id: Publisher id to assume when the item carries none

    Returns:
        The Article, or None when a required field (title, source_id,
        pubDate, link) is missing, blank or unparseable.
    """
    if not isinstance(item, dict):
        logger.warning("Skipping raw item: expected an object, got %s", type(item).__name__)
        return None

    title = _text(item, "title")
    source_id = _text(item, "source_id", "sourceId") or default_source_id
    published_raw = _text(item, "pubDate", "publishedAt")
    link = _text(item, "link")
    provider_id = normalize_provider_id(item.get("article_id", item.get("id")))

    if not title or not source_id or not published_raw or not link:
        missing = [
            name
            for name, value in zip(_REQUIRED_FIELDS, (title, source_id, published_raw, link))
            if not value
        ]
        logger.warning(
            "Skipping article %s: missing required fields (%s)",
            provider_id or link or "unknown",
            ", ".join(missing),
        )
        return None

    published_at = parse_published_at(published_raw)
    if published_at is None:
        logger.warning("Skipping article %s: unparseable pubDate %r", provider_id or link, published_raw)
        return None

    return Article(
        provider_id=provider_id,
        title=title,
        source_id=source_id,
        published_at=published_at,
        link=link,
        image_url=_text(item, "image_url", "imageUrl"),
        description=_text(item, "description"),
    )


def _text(item: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = item.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None
