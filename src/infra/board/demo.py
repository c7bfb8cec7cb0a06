"""Demo board content shared by the memory backend and the Postgres seeder."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from src.shared.types import Priority

if TYPE_CHECKING:
    from src.infra.board.memory_store import InMemoryTaskStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DemoTask:
    title: str
    column: str
    priority: Priority = Priority.MEDIUM
    labels: tuple[str, ...] = ()


@dataclass(frozen=True)
class DemoProject:
    name: str
    color: str
    columns: tuple[str, ...] = ("To Do", "In Progress", "Done")
    tasks: tuple[DemoTask, ...] = field(default_factory=tuple)


DEMO_LABELS: dict[str, str] = {
    "Bug": "#EF4444",
    "Feature": "#10B981",
    "Urgent": "#F59E0B",
}

DEMO_BOARD: tuple[DemoProject, ...] = (
    DemoProject(
        name="Website Redesign",
        color="#3B82F6",
        tasks=(
            DemoTask("Design landing page", "To Do", Priority.HIGH, ("Feature",)),
            DemoTask("Fix login bug", "In Progress", Priority.HIGH, ("Bug", "Urgent")),
            DemoTask("Write release notes", "Done", Priority.LOW),
        ),
    ),
    DemoProject(
        name="Mobile App",
        color="#8B5CF6",
        tasks=(
            DemoTask("Set up push notifications", "To Do"),
            DemoTask("Crash on startup", "To Do", Priority.HIGH, ("Bug",)),
        ),
    ),
)


async def seed_memory_store(
    store: InMemoryTaskStore,
    board: tuple[DemoProject, ...] = DEMO_BOARD,
) -> None:
    """Populate an in-memory store with the demo board."""
    labels = {
        name: await store.create_label(name, color) for name, color in DEMO_LABELS.items()
    }
    task_count = 0
    for entry in board:
        project = await store.create_project(entry.name, entry.color)
        columns = {name: await store.create_column(project.id, name) for name in entry.columns}
        for demo in entry.tasks:
            task = await store.create_task(
                columns[demo.column].id, demo.title, priority=demo.priority
            )
            for label_name in demo.labels:
                await store.add_label_to_task(task.id, labels[label_name].id)
            task_count += 1
    logger.info("Seeded demo board: %d project(s), %d task(s)", len(board), task_count)
