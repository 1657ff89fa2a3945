"""
HTTP client for the upstream news provider.

A single GET per page, bounded by an overall deadline and never retried. Every
failure is raised as a typed error so callers can tell timeouts apart from
other transport failures.
"""

from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass
import json
import logging
import time
from typing import Any, Callable, ContextManager

import httpx

from .config import UpstreamConfig
from .errors import UpstreamTimeoutError, UpstreamTransportError
from .logging_utils import log_event

logger = logging.getLogger(__name__)


@dataclass
class UpstreamPage:
    """Raw page as returned by the provider.

    Attributes:
        results: Unvalidated article objects
        next_page: Opaque token for the following page, None on the last page
    """

    results: list[Any]
    next_page: str | None


def build_params(
    cfg: UpstreamConfig,
    api_key: str,
    query: str | None = None,
    page_token: str | None = None,
) -> dict[str, str]:
    params = {"apikey": api_key, "language": cfg.language}
    if query:
        params["q"] = query
    if page_token:
        params["page"] = page_token
    return params


def fetch_page(
    cfg: UpstreamConfig,
    api_key: str,
    query: str | None = None,
    page_token: str | None = None,
    client: httpx.Client | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> UpstreamPage:
    """Fetch one page of raw articles from the provider.

    httpx applies `cfg.timeout_seconds` to each phase (connect, each read)
    separately. The body is streamed and checked against the same value as
    an overall deadline, so an upstream that trickles bytes cannot hold the
    request open indefinitely.

    Args:
        cfg: Upstream endpoint and timeout settings
        api_key: Provider credential
        query: Search query, None in browse mode
        page_token: Token from a previous page's `nextPage`
        client: Optional preconfigured client, mainly for tests
        clock: Monotonic time source for the overall deadline

    Returns:
        UpstreamPage with the raw `results` array and `nextPage` token

    Raises:
        UpstreamTimeoutError: If the complete response does not arrive within
            cfg.timeout_seconds
        UpstreamTransportError: On network failure, non-2xx status or a body
            without a `results` array
    """
    params = build_params(cfg, api_key, query, page_token)
    log_event(logger, "Upstream request", event="upstream_request", query=query, page=page_token)

    start = clock()
    try:
        with _client_for(cfg, client) as http:
            with http.stream("GET", cfg.base_url, params=params, timeout=cfg.timeout_seconds) as resp:
                body = _read_body(resp, start, cfg.timeout_seconds, clock)
    except httpx.TimeoutException as exc:
        raise UpstreamTimeoutError(details=f"{type(exc).__name__}: {exc}") from exc
    except httpx.HTTPError as exc:
        raise UpstreamTransportError(details=f"{type(exc).__name__}: {exc}") from exc

    log_event(logger, "Upstream response", event="upstream_response", status_code=resp.status_code)

    if not resp.is_success:
        text = body.decode(resp.encoding or "utf-8", errors="replace")
        raise UpstreamTransportError(
            f"News API error {resp.status_code}",
            details=text or resp.reason_phrase,
            status=resp.status_code,
        )

    return _parse_body(body)


def _client_for(cfg: UpstreamConfig, client: httpx.Client | None) -> ContextManager[httpx.Client]:
    # an injected client is borrowed, not closed
    if client is not None:
        return nullcontext(client)
    return httpx.Client(
        timeout=cfg.timeout_seconds,
        headers={"User-Agent": cfg.user_agent},
        trust_env=cfg.trust_env,
    )


def _read_body(resp: httpx.Response, start: float, deadline: float, clock: Callable[[], float]) -> bytes:
    chunks: list[bytes] = []
    for chunk in resp.iter_bytes():
        chunks.append(chunk)
        _check_deadline(start, deadline, clock)
    _check_deadline(start, deadline, clock)
    return b"".join(chunks)


def _check_deadline(start: float, deadline: float, clock: Callable[[], float]) -> None:
    elapsed = clock() - start
    if elapsed > deadline:
        raise UpstreamTimeoutError(details=f"Response not complete after {elapsed:.1f}s (limit {deadline:.1f}s)")


def _parse_body(body: bytes) -> UpstreamPage:
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise UpstreamTransportError("Unexpected API response format", details=str(exc)) from exc

    if not isinstance(data, dict) or not isinstance(data.get("results"), list):
        raise UpstreamTransportError("Unexpected API response format")

    next_page = data.get("nextPage")
    if next_page is not None:
        next_page = str(next_page)
    return UpstreamPage(results=data["results"], next_page=next_page or None)
