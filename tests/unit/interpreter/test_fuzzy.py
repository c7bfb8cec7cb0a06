"""Tests for fuzzy name matching."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from src.interpreter.fuzzy import (
    CANDIDATE_CONTAINMENT_SCORE,
    CONTAINMENT_SCORE,
    EXACT_SCORE,
    find_best_match,
    similarity,
)


@dataclass(frozen=True)
class Named:
    name: str


COLUMNS = [Named("To Do"), Named("In Progress"), Named("Done")]


@pytest.mark.unit
class TestSimilarity:
    def test_equal_after_normalization(self) -> None:
        assert similarity("To-Do", "to do") == EXACT_SCORE

    def test_containment_either_way(self) -> None:
        assert similarity("login", "Fix login bug") == CONTAINMENT_SCORE
        assert similarity("Fix login bug", "login") == CONTAINMENT_SCORE

    def test_word_overlap_uses_longer_word_count(self) -> None:
        # 1 shared word of max(2, 4)
        assert similarity("login page", "fix the login flow") == pytest.approx(0.25)

    def test_empty_side_scores_zero(self) -> None:
        assert similarity("", "anything") == 0.0
        assert similarity(None, "anything") == 0.0


@pytest.mark.unit
class TestFindBestMatch:
    def test_exact_match_wins_immediately(self) -> None:
        match = find_best_match("done", COLUMNS)
        assert match is not None
        assert match.item.name == "Done"
        assert match.score == EXACT_SCORE

    def test_containment_scores_candidate_constant(self) -> None:
        match = find_best_match("progress", COLUMNS)
        assert match is not None
        assert match.item.name == "In Progress"
        assert match.score == CANDIDATE_CONTAINMENT_SCORE

    def test_first_candidate_wins_ties(self) -> None:
        # "do" is contained in both "to do" and "done"
        match = find_best_match("do", COLUMNS)
        assert match is not None
        assert match.item.name == "To Do"

    def test_exact_beats_earlier_containment(self) -> None:
        match = find_best_match("Done", [Named("Done soon"), Named("Done")])
        assert match is not None
        assert match.item.name == "Done"

    def test_word_overlap_above_floor(self) -> None:
        tasks = [Named("fix login page layout")]
        match = find_best_match("login page styling", tasks)
        assert match is not None
        assert match.score == pytest.approx(0.5)

    def test_word_overlap_at_or_below_floor_is_none(self) -> None:
        tasks = [Named("fix login page layout today")]
        assert find_best_match("login rewrite", tasks) is None

    @pytest.mark.parametrize("query", ["", None, "  ", "!!"])
    def test_empty_query_is_none(self, query: str | None) -> None:
        assert find_best_match(query, COLUMNS) is None

    def test_no_candidates_is_none(self) -> None:
        assert find_best_match("done", []) is None

    def test_custom_key(self) -> None:
        titles = ["Setup CI", "Release notes"]
        match = find_best_match("release", titles, key=lambda t: t)
        assert match is not None
        assert match.item == "Release notes"
