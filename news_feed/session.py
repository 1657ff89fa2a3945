"""
Client session driving the merge store from asynchronous fetches.

Every fetch is issued with a FetchTicket carrying a monotonically increasing
generation. Only the outcome of the most recently issued ticket may touch the
store; anything older has been superseded and is discarded on arrival. This
gives "apply in initiation order, cancel superseded requests" semantics no
matter in which order responses complete.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
from typing import Callable, Literal

from .core.store import MergeStore
from .core.types import BROWSE, SEARCH, AggregatedResult, Article, ErrorResult, Mode
from .errors import ValidationError
from .logging_utils import log_event
from .service import NewsRequest, resolve_mode

logger = logging.getLogger(__name__)

FetchKind = Literal["load", "next_page"]
Fetcher = Callable[[NewsRequest], "AggregatedResult | ErrorResult"]


@dataclass(frozen=True)
class FetchTicket:
    """Handle for one issued fetch.

    Attributes:
        generation: Position in issue order; higher supersedes lower
        kind: "load" for a fresh view, "next_page" for pagination
        mode: Mode the request was issued in
        query: Trimmed search query, None in browse mode
        page_token: Token sent with the request
    """

    generation: int
    kind: FetchKind
    mode: Mode
    query: str | None
    page_token: str | None

    @property
    def request(self) -> NewsRequest:
        return NewsRequest(query=self.query, page_token=self.page_token)


class NewsSession:
    """Owns one MergeStore plus the pagination cursor for a client.

    Args:
        fetch: Callable performing the request, e.g. NewsService.aggregate_news
        store: Store to drive; a fresh one is created when omitted
        min_query_length: Shortest trimmed query that starts a search
    """

    def __init__(
        self,
        fetch: Fetcher,
        store: MergeStore | None = None,
        min_query_length: int = 2,
    ):
        self._fetch = fetch
        self.store = store if store is not None else MergeStore()
        self.min_query_length = min_query_length
        self.mode: Mode = BROWSE
        self.query: str | None = None
        self.next_page_token: str | None = None
        self.last_error: ErrorResult | None = None
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def articles(self) -> list[Article]:
        return self.store.articles

    @property
    def new_ids(self) -> set[str]:
        return self.store.new_ids

    @property
    def has_next_page(self) -> bool:
        return self.next_page_token is not None

    def clear_new_markers(self) -> None:
        """Called by the UI after it has shown the "new" badges once."""
        with self._lock:
            self.store.clear_new_markers()

    def begin_load(self, query: str | None = None) -> FetchTicket:
        """Issue a fresh browse or search request, superseding anything in flight.

        Raises:
            ValidationError: If the query is non-blank but shorter than
                min_query_length
        """
        trimmed = (query or "").strip()
        if trimmed and len(trimmed) < self.min_query_length:
            raise ValidationError(
                f"Search term must be at least {self.min_query_length} characters long"
            )
        mode, resolved = resolve_mode(trimmed, self.min_query_length)
        return self._issue("load", mode, resolved, None)

    def begin_next_page(self) -> FetchTicket | None:
        """Issue a request for the page after the last applied one.

        Returns None when there is no further page.
        """
        with self._lock:
            token = self.next_page_token
            mode = self.mode
            query = self.query
        if token is None:
            return None
        return self._issue("next_page", mode, query, token)

    def is_current(self, ticket: FetchTicket) -> bool:
        with self._lock:
            return ticket.generation == self._generation

    def apply(self, ticket: FetchTicket, outcome: AggregatedResult | ErrorResult) -> bool:
        """Apply a completed fetch if its ticket is still the latest.

        Returns:
            True when the outcome was applied, False when it was stale
        """
        with self._lock:
            if ticket.generation != self._generation:
                log_event(
                    logger,
                    "Discarded stale result",
                    event="session_stale",
                    generation=ticket.generation,
                    latest=self._generation,
                )
                return False

            if isinstance(outcome, ErrorResult):
                self._apply_error(ticket, outcome)
            else:
                self._apply_result(ticket, outcome)
            return True

    def load(self, query: str | None = None) -> bool:
        ticket = self.begin_load(query)
        return self.apply(ticket, self._fetch(ticket.request))

    def next_page(self) -> bool | None:
        ticket = self.begin_next_page()
        if ticket is None:
            return None
        return self.apply(ticket, self._fetch(ticket.request))

    def _issue(self, kind: FetchKind, mode: Mode, query: str | None, page_token: str | None) -> FetchTicket:
        with self._lock:
            self._generation += 1
            return FetchTicket(
                generation=self._generation,
                kind=kind,
                mode=mode,
                query=query,
                page_token=page_token,
            )

    def _apply_result(self, ticket: FetchTicket, result: AggregatedResult) -> None:
        self.last_error = None
        if ticket.kind == "next_page":
            self.store.merge_next_page(result)
        elif ticket.mode == SEARCH:
            self.store.hydrate(result, is_search_mode=True)
        else:
            # leaving search mode starts a fresh browse accumulation
            if self.mode == SEARCH:
                self.store.reset()
            self.store.hydrate(result, is_search_mode=False)
        self.mode = ticket.mode
        self.query = ticket.query
        self.next_page_token = result.next_page_token

    def _apply_error(self, ticket: FetchTicket, error: ErrorResult) -> None:
        self.last_error = error
        if ticket.kind == "load" and ticket.mode == SEARCH and error.is_empty:
            self.store.hydrate(None, is_search_mode=True)
            self.mode = SEARCH
            self.query = ticket.query
            self.next_page_token = None
