"""
Title normalization and token-set similarity.

Titles are compared as sets of lowercase alphanumeric tokens using the
Jaccard index, so word order and repeated words do not matter.
"""

from __future__ import annotations

import re
from typing import Iterable

_PUNCT_RE = re.compile(r"[^\w\s]|_")


def tokenize_title(title: str) -> list[str]:
    """Split a title into comparable tokens.

    Lowercases, strips punctuation and splits on whitespace. Empty tokens
    are dropped, so an empty or punctuation-only title yields [].

    Examples:
        >>> tokenize_title("Market rallies, as stocks surge!")
        ['market', 'rallies', 'as', 'stocks', 'surge']
    """
    return _PUNCT_RE.sub("", title.lower()).split()


def jaccard(a: Iterable[str], b: Iterable[str]) -> float:
    """Jaccard index of two token collections, 0.0 when both are empty."""
    set_a = set(a)
    set_b = set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def title_similarity(title_a: str, title_b: str) -> float:
    return jaccard(tokenize_title(title_a), tokenize_title(title_b))
