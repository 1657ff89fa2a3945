"""
Client-side accumulation of aggregated pages.

The MergeStore keeps every article the client has seen, newest-known first,
and remembers which identity keys arrived with the most recent merge so the
presentation layer can highlight them for one display cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Iterable

from ..logging_utils import log_event
from .dedup import dedup_exact
from .types import AggregatedResult, Article

logger = logging.getLogger(__name__)


@dataclass
class AccumulatedState:
    """Snapshot of the accumulation.

    Attributes:
        articles: Known articles, new arrivals first, identity keys unique
        new_ids: Identity keys introduced by the most recent merge
    """

    articles: list[Article] = field(default_factory=list)
    new_ids: set[str] = field(default_factory=set)


class MergeStore:
    """Owns the AccumulatedState for one client session.

    Merges never raise on empty or missing input; they are no-ops.
    """

    def __init__(self, state: AccumulatedState | None = None):
        self._state = state or AccumulatedState()

    @property
    def state(self) -> AccumulatedState:
        return self._state

    @property
    def articles(self) -> list[Article]:
        return list(self._state.articles)

    @property
    def new_ids(self) -> set[str]:
        return set(self._state.new_ids)

    def known_ids(self) -> set[str]:
        return {article.id for article in self._state.articles}

    def hydrate(self, result: AggregatedResult | None, is_search_mode: bool = False) -> list[Article]:
        """Absorb an initial page.

        A search result replaces the accumulation and marks every article new.
        A browse result is merged like a next page, except that an empty
        diff leaves the previous new markers untouched.

        Returns:
            The articles marked new by this call
        """
        if is_search_mode:
            incoming = dedup_exact(_articles_of(result))
            self._state.articles = incoming
            self._state.new_ids = {article.id for article in incoming}
            log_event(logger, "Store replaced", event="store_replace", count=len(incoming))
            return list(incoming)

        incoming = self._diff(_articles_of(result))
        if incoming:
            self._prepend(incoming)
        return incoming

    def merge_next_page(self, result: AggregatedResult | None) -> list[Article]:
        """Prepend the genuinely new articles of a page.

        `new_ids` is reset to exactly the articles added by this call, so a
        repeated merge of the same page leaves it empty.

        Returns:
            The articles added by this call
        """
        incoming = self._diff(_articles_of(result))
        if incoming:
            self._prepend(incoming)
        else:
            self._state.new_ids = set()
        return incoming

    def clear_new_markers(self) -> None:
        self._state.new_ids = set()

    def reset(self) -> None:
        self._state = AccumulatedState()

    def _diff(self, articles: Iterable[Article]) -> list[Article]:
        known = self.known_ids()
        incoming: list[Article] = []
        for article in articles:
            if article.id in known:
                continue
            known.add(article.id)
            incoming.append(article)
        return incoming

    def _prepend(self, incoming: list[Article]) -> None:
        self._state.articles = incoming + self._state.articles
        self._state.new_ids = {article.id for article in incoming}
        log_event(
            logger,
            "Store merged",
            event="store_merge",
            added=len(incoming),
            total=len(self._state.articles),
        )


def _articles_of(result: AggregatedResult | None) -> list[Article]:
    if result is None:
        return []
    return list(result.articles or [])
