"""Root conftest - shared fixtures for all test layers.

Markers:
    @pytest.mark.unit       - No external deps

The `board` fixture seeds an in-memory store with a fixed clock:

    Website     To Do:       Fix login bug (high), Write docs (low)
                In Progress: Design homepage
                Done:        Setup CI, Release notes, Deploy staging
    Mobile App  Backlog:     Push notifications (due yesterday),
                             Crash report (high, due today, [Bug])
                Shipped:     -

Labels: Bug, Feature.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from src.interpreter import CommandInterpreter
from src.shared.types import Priority
from tests.fakes import RecordingTaskStore

if TYPE_CHECKING:
    from src.shared.types import Column, Label, Project, Task

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)
TODAY = date(2026, 3, 10)


def fixed_clock() -> datetime:
    return NOW


@dataclass
class Board:
    store: RecordingTaskStore
    projects: dict[str, Project] = field(default_factory=dict)
    columns: dict[str, Column] = field(default_factory=dict)
    labels: dict[str, Label] = field(default_factory=dict)
    tasks: dict[str, Task] = field(default_factory=dict)

    async def current(self, title: str) -> Task:
        """Re-read a seeded task from the store by its original title."""
        task_id = self.tasks[title].id
        for task in await self.store.list_tasks():
            if task.id == task_id:
                return task
        msg = f"task {title!r} no longer exists"
        raise LookupError(msg)


async def build_board() -> Board:
    store = RecordingTaskStore(clock=fixed_clock)
    board = Board(store=store)

    website = await store.create_project("Website")
    mobile = await store.create_project("Mobile App", "#8B5CF6")
    board.projects = {"website": website, "mobile": mobile}

    for key, project, name in (
        ("todo", website, "To Do"),
        ("progress", website, "In Progress"),
        ("done", website, "Done"),
        ("backlog", mobile, "Backlog"),
        ("shipped", mobile, "Shipped"),
    ):
        board.columns[key] = await store.create_column(project.id, name)

    board.labels["Bug"] = await store.create_label("Bug", "#EF4444")
    board.labels["Feature"] = await store.create_label("Feature", "#10B981")

    seed = (
        ("todo", "Fix login bug", Priority.HIGH, None),
        ("todo", "Write docs", Priority.LOW, None),
        ("progress", "Design homepage", Priority.MEDIUM, None),
        ("done", "Setup CI", Priority.MEDIUM, None),
        ("done", "Release notes", Priority.MEDIUM, None),
        ("done", "Deploy staging", Priority.MEDIUM, None),
        ("backlog", "Push notifications", Priority.MEDIUM, TODAY - timedelta(days=1)),
        ("backlog", "Crash report", Priority.HIGH, TODAY),
    )
    for column_key, title, priority, due in seed:
        board.tasks[title] = await store.create_task(
            board.columns[column_key].id, title, priority=priority, due_date=due
        )
    await store.add_label_to_task(board.tasks["Crash report"].id, board.labels["Bug"].id)

    store.calls.clear()
    return board


@pytest.fixture
async def board() -> Board:
    return await build_board()


@pytest.fixture
def interpreter(board: Board) -> CommandInterpreter:
    return CommandInterpreter(board.store)
