"""In-memory TaskStorePort implementation.

Day-1 adapter: backs the dev server (BOARD_STORE_BACKEND=memory) and the
test suite. Holds plain dicts of immutable domain objects; every write
swaps in a new instance. A monotonically increasing sequence number breaks
created_at ties so "newest first" ordering stays deterministic.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TypeVar
from uuid import UUID, uuid4

from src.ports.task_store_port import TaskStorePort
from src.shared.errors import ConflictError, NotFoundError
from src.shared.types import (
    DEFAULT_LABEL_COLOR,
    POSITION_GAP,
    ActivityAction,
    ActivityEntry,
    Column,
    Label,
    Priority,
    Project,
    Task,
    TaskQuery,
)

if TYPE_CHECKING:
    from datetime import date

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class InMemoryTaskStore(TaskStorePort):
    """Dict-backed board store.

    Args:
        clock: Returns "now"; its date is "today" for overdue and
            due-today filters. Injected so tests can pin the date.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._projects: dict[UUID, Project] = {}
        self._columns: dict[UUID, Column] = {}
        self._labels: dict[UUID, Label] = {}
        self._tasks: dict[UUID, Task] = {}
        self._task_seq: dict[UUID, int] = {}
        self._activity: list[ActivityEntry] = []
        self._seq = 0

    # -- Seeding (not part of the port) --

    async def create_project(self, name: str, color: str = "#3B82F6") -> Project:
        project = Project(id=uuid4(), name=name, color=color, created_at=self._clock())
        self._projects[project.id] = project
        return project

    async def create_column(
        self,
        project_id: UUID,
        name: str,
        position: int | None = None,
    ) -> Column:
        self._require(self._projects, project_id, "Project")
        if position is None:
            siblings = [c.position for c in self._columns.values() if c.project_id == project_id]
            position = max(siblings, default=-1) + 1
        column = Column(id=uuid4(), project_id=project_id, name=name, position=position)
        self._columns[column.id] = column
        return column

    # -- Reads --

    async def list_projects(self) -> list[Project]:
        return sorted(self._projects.values(), key=lambda p: p.name.lower())

    async def list_columns(self, project_id: UUID | None = None) -> list[Column]:
        columns = [
            c for c in self._columns.values() if project_id is None or c.project_id == project_id
        ]
        return sorted(columns, key=self._column_sort_key)

    async def list_labels(self) -> list[Label]:
        return sorted(self._labels.values(), key=lambda lb: lb.name.lower())

    async def list_tasks(self, query: TaskQuery | None = None) -> list[Task]:
        query = query or TaskQuery()
        today = self._clock().date()
        label_ids: set[UUID] | None = None
        if query.label_name is not None:
            wanted = query.label_name.lower()
            label_ids = {lb.id for lb in self._labels.values() if lb.name.lower() == wanted}

        matched: list[Task] = []
        for task in self._tasks.values():
            column = self._columns.get(task.column_id)
            if query.column_id is not None and task.column_id != query.column_id:
                continue
            if query.project_id is not None and (
                column is None or column.project_id != query.project_id
            ):
                continue
            if label_ids is not None and not (task.label_ids & label_ids):
                continue
            if query.priority is not None and task.priority != query.priority:
                continue
            if query.overdue and (task.due_date is None or task.due_date >= today):
                continue
            if query.due_today and task.due_date != today:
                continue
            matched.append(task)

        matched.sort(
            key=lambda t: (t.created_at or datetime.min.replace(tzinfo=UTC), self._task_seq[t.id]),
            reverse=True,
        )
        if query.limit is not None:
            matched = matched[: query.limit]
        return matched

    async def get_label_by_name(self, name: str) -> Label | None:
        wanted = name.lower()
        for label in self._labels.values():
            if label.name.lower() == wanted:
                return label
        return None

    async def get_max_position(self, column_id: UUID) -> int:
        positions = [t.position for t in self._tasks.values() if t.column_id == column_id]
        return max(positions, default=0)

    async def list_activity(self, task_id: UUID) -> list[ActivityEntry]:
        return [e for e in reversed(self._activity) if e.task_id == task_id]

    # -- Writes --

    async def create_task(
        self,
        column_id: UUID,
        title: str,
        *,
        priority: Priority | None = None,
        description: str | None = None,
        due_date: date | None = None,
    ) -> Task:
        self._require(self._columns, column_id, "Column")
        now = self._clock()
        task = Task(
            id=uuid4(),
            column_id=column_id,
            title=title,
            priority=priority or Priority.MEDIUM,
            position=await self.get_max_position(column_id) + POSITION_GAP,
            description=description,
            due_date=due_date,
            created_at=now,
            updated_at=now,
        )
        self._seq += 1
        self._task_seq[task.id] = self._seq
        self._tasks[task.id] = task
        return task

    async def update_task(
        self,
        task_id: UUID,
        *,
        title: str | None = None,
        priority: Priority | None = None,
        description: str | None = None,
        due_date: date | None = None,
    ) -> Task:
        task = self._require(self._tasks, task_id, "Task")
        changes: dict[str, object] = {}
        if title is not None:
            changes["title"] = title
        if priority is not None:
            changes["priority"] = priority
        if description is not None:
            changes["description"] = description
        if due_date is not None:
            changes["due_date"] = due_date
        if not changes:
            return task
        updated = replace(task, **changes, updated_at=self._clock())
        self._tasks[task_id] = updated
        return updated

    async def move_task(self, task_id: UUID, *, column_id: UUID, position: int) -> Task:
        task = self._require(self._tasks, task_id, "Task")
        self._require(self._columns, column_id, "Column")
        moved = replace(task, column_id=column_id, position=position, updated_at=self._clock())
        self._tasks[task_id] = moved
        return moved

    async def delete_task(self, task_id: UUID) -> bool:
        if self._tasks.pop(task_id, None) is None:
            return False
        self._task_seq.pop(task_id, None)
        return True

    async def add_label_to_task(self, task_id: UUID, label_id: UUID) -> bool:
        task = self._require(self._tasks, task_id, "Task")
        self._require(self._labels, label_id, "Label")
        if label_id in task.label_ids:
            return False
        self._tasks[task_id] = replace(task, label_ids=task.label_ids | {label_id})
        return True

    async def remove_label_from_task(self, task_id: UUID, label_id: UUID) -> bool:
        task = self._require(self._tasks, task_id, "Task")
        if label_id not in task.label_ids:
            return False
        self._tasks[task_id] = replace(task, label_ids=task.label_ids - {label_id})
        return True

    async def create_label(self, name: str, color: str = DEFAULT_LABEL_COLOR) -> Label:
        if await self.get_label_by_name(name) is not None:
            msg = f"Label already exists: {name}"
            raise ConflictError(msg)
        label = Label(id=uuid4(), name=name, color=color)
        self._labels[label.id] = label
        return label

    async def log_activity(
        self,
        task_id: UUID,
        action: ActivityAction,
        details: str,
        actor: str = "User",
    ) -> ActivityEntry:
        entry = ActivityEntry(
            id=uuid4(),
            task_id=task_id,
            action=action,
            details=details,
            actor=actor,
            created_at=self._clock(),
        )
        self._activity.append(entry)
        logger.debug("Activity %s on task %s: %s", action.value, task_id, details)
        return entry

    # -- Internal --

    def _column_sort_key(self, column: Column) -> tuple[str, int]:
        project = self._projects.get(column.project_id)
        return (project.name.lower() if project else "", column.position)

    @staticmethod
    def _require(table: dict[UUID, T], key: UUID, resource_type: str) -> T:
        try:
            return table[key]
        except KeyError:
            raise NotFoundError(resource_type, str(key)) from None
