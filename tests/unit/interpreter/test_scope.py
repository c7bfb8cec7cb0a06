"""Tests for bulk detection and target resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from src.interpreter.entities import extract_entities, load_catalog
from src.interpreter.scope import (
    bulk_tasks,
    is_bulk,
    match_task,
    resolve_tasks,
    singular_tasks,
    structural_tasks,
)

if TYPE_CHECKING:
    from tests.conftest import Board


@pytest.mark.unit
class TestIsBulk:
    @pytest.mark.parametrize(
        "message",
        [
            "Add tag Bug to all tasks in To Do",
            "delete every task",
            "tag each one",
            "move multiple tasks",
            "Batch update",
            "BULK move",
        ],
    )
    def test_bulk_words(self, message: str) -> None:
        assert is_bulk(message)

    @pytest.mark.parametrize(
        "message",
        [
            "install the app",
            "a tall order",
            "everyone",
            "Small fixes first",
            "Move Write docs to Done",
        ],
    )
    def test_whole_words_only(self, message: str) -> None:
        assert not is_bulk(message)


@pytest.mark.unit
class TestResolveTasks:
    async def test_bulk_uses_named_column(self, board: Board) -> None:
        catalog = await load_catalog(board.store)
        entities = extract_entities("all tasks in To Do", catalog)

        tasks = resolve_tasks(entities, catalog, bulk=True)

        assert {t.title for t in tasks} == {"Fix login bug", "Write docs"}

    async def test_bulk_falls_back_to_project(self, board: Board) -> None:
        catalog = await load_catalog(board.store)
        entities = extract_entities("all tasks in Mobile App", catalog)

        assert {t.title for t in structural_tasks(entities, catalog)} == {
            "Push notifications",
            "Crash report",
        }

    async def test_bulk_without_structure(self, board: Board) -> None:
        catalog = await load_catalog(board.store)
        entities = extract_entities("all tasks", catalog)

        assert bulk_tasks(entities, catalog) == []
        assert len(bulk_tasks(entities, catalog, whole_board=True)) == 8

    async def test_empty_named_column_does_not_widen_to_board(self, board: Board) -> None:
        catalog = await load_catalog(board.store)
        entities = extract_entities("all tasks in Shipped", catalog)

        assert bulk_tasks(entities, catalog, whole_board=True) == []

    async def test_singular_prefers_named_tasks(self, board: Board) -> None:
        catalog = await load_catalog(board.store)
        entities = extract_entities("Write docs please", catalog)

        tasks = singular_tasks(entities, catalog, fragment="Setup CI")

        assert [t.title for t in tasks] == ["Write docs"]

    async def test_singular_fuzzy_fragment(self, board: Board) -> None:
        catalog = await load_catalog(board.store)
        entities = extract_entities("the homepage one", catalog)

        tasks = resolve_tasks(entities, catalog, bulk=False, fragment="homepage")

        assert [t.title for t in tasks] == ["Design homepage"]

    async def test_singular_no_match(self, board: Board) -> None:
        catalog = await load_catalog(board.store)
        entities = extract_entities("something else", catalog)

        assert resolve_tasks(entities, catalog, bulk=False, fragment="nonexistent") == []

    async def test_match_task(self, board: Board) -> None:
        catalog = await load_catalog(board.store)
        task = match_task("release", catalog)
        assert task is not None
        assert task.title == "Release notes"
        assert match_task(None, catalog) is None
