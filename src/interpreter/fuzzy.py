"""Fuzzy name matching for board entities.

Scores are fixed thresholds, not tuned weights: handlers treat a returned
match as "found" and None as "ask again", so changing a constant changes
which sentences resolve to a task or column.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from src.interpreter.normalize import normalize

T = TypeVar("T")

EXACT_SCORE = 1.0
CONTAINMENT_SCORE = 0.8
CANDIDATE_CONTAINMENT_SCORE = 0.9
WORD_OVERLAP_FLOOR = 0.3


@dataclass(frozen=True)
class MatchResult(Generic[T]):
    """Best candidate and its score in (WORD_OVERLAP_FLOOR, 1.0]."""

    item: T
    score: float


def _name_of(item: Any) -> str:
    return item.name


def _similarity_normalized(a: str, b: str) -> float:
    if a == b:
        return EXACT_SCORE
    if not a or not b:
        return 0.0
    if a in b or b in a:
        return CONTAINMENT_SCORE
    words_a = a.split(" ")
    words_b = set(b.split(" "))
    shared = sum(1 for word in words_a if word in words_b)
    return shared / max(len(words_a), len(words_b))


def similarity(a: str | None, b: str | None) -> float:
    """Score two strings in [0, 1] after normalization.

    Equal -> 1.0, containment either way -> 0.8, otherwise the share of
    words in `a` that also occur in `b`, over the longer word count.
    """
    return _similarity_normalized(normalize(a), normalize(b))


def find_best_match(
    query: str | None,
    items: Iterable[T],
    key: Callable[[T], str] = _name_of,
) -> MatchResult[T] | None:
    """Return the highest-scoring candidate for `query`, or None.

    An exact normalized match returns immediately. Containment scores
    CANDIDATE_CONTAINMENT_SCORE; word overlap must exceed
    WORD_OVERLAP_FLOOR. The first candidate at the best score wins.
    """
    needle = normalize(query)
    if not needle:
        return None

    best: T | None = None
    best_score = 0.0
    for item in items:
        name = normalize(key(item))
        if not name:
            continue
        if name == needle:
            return MatchResult(item=item, score=EXACT_SCORE)
        if name in needle or needle in name:
            if CANDIDATE_CONTAINMENT_SCORE > best_score:
                best, best_score = item, CANDIDATE_CONTAINMENT_SCORE
            continue
        score = _similarity_normalized(name, needle)
        if score > best_score and score > WORD_OVERLAP_FLOOR:
            best, best_score = item, score

    if best is None:
        return None
    return MatchResult(item=best, score=best_score)
