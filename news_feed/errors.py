"""
Error taxonomy for the aggregation core.

Every error carries an HTTP-like status so the service boundary can turn it
into an ErrorResult without a lookup table.
"""

from __future__ import annotations

from .core.types import ErrorResult


class NewsFeedError(Exception):
    """Base class for all aggregation failures."""

    status: int = 500
    default_message: str = "Failed to fetch news"

    def __init__(self, message: str | None = None, details: str | None = None, status: int | None = None):
        self.message = message or self.default_message
        self.details = details
        if status is not None:
            self.status = status
        super().__init__(self.message)

    def to_result(self) -> ErrorResult:
        return ErrorResult(
            kind=type(self).__name__,
            status=self.status,
            message=self.message,
            details=self.details,
        )


class ValidationError(NewsFeedError):
    """Malformed client request; never reaches the upstream."""

    status = 400
    default_message = "Invalid request"


class ConfigurationError(NewsFeedError):
    """Required server-side setting (the upstream API key) is missing."""

    status = 500
    default_message = "API key missing"


class UpstreamTransportError(NewsFeedError):
    """Non-2xx status, network failure or malformed body from the upstream."""

    status = 502
    default_message = "Failed to fetch news"


class UpstreamTimeoutError(NewsFeedError):
    status = 504
    default_message = "News API request timed out"


class NoResultsError(NewsFeedError):
    """Filtering legitimately left nothing to show. Not a failure."""

    status = 404
    default_message = "No articles found"
