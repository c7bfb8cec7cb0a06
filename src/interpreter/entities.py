"""Entity extraction against a per-request board catalog.

The catalog is a read-only snapshot loaded through TaskStorePort at the
start of each command. Extraction is substring containment over
normalized names, in catalog order, with no fuzzy scoring: a task titled
"Fix" matches any sentence containing the word "fix". Handlers fall back
to fuzzy matching themselves when nothing is extracted.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING, Any

from src.interpreter.normalize import normalize
from src.shared.types import Column, Label, Priority, Project, Task

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from uuid import UUID

    from src.ports.task_store_port import TaskStorePort

logger = logging.getLogger(__name__)

_PRIORITY_PATTERNS = (
    re.compile(r"\b(high|medium|low)\s*priority\b"),
    re.compile(r"\bpriority\s*(high|medium|low)\b"),
)


@dataclass(frozen=True)
class Catalog:
    """Snapshot of every project, column, label and task on the board.

    Tasks keep the store's newest-first order; columns are ordered by
    project name, then position.
    """

    projects: tuple[Project, ...] = ()
    columns: tuple[Column, ...] = ()
    labels: tuple[Label, ...] = ()
    tasks: tuple[Task, ...] = ()

    @cached_property
    def _projects_by_id(self) -> dict[UUID, Project]:
        return {p.id: p for p in self.projects}

    @cached_property
    def _columns_by_id(self) -> dict[UUID, Column]:
        return {c.id: c for c in self.columns}

    @cached_property
    def _labels_by_id(self) -> dict[UUID, Label]:
        return {lb.id: lb for lb in self.labels}

    def column_by_id(self, column_id: UUID) -> Column | None:
        return self._columns_by_id.get(column_id)

    def project_by_id(self, project_id: UUID) -> Project | None:
        return self._projects_by_id.get(project_id)

    def project_for_column(self, column: Column) -> Project | None:
        return self._projects_by_id.get(column.project_id)

    def column_of(self, task: Task) -> Column | None:
        return self._columns_by_id.get(task.column_id)

    def project_of(self, task: Task) -> Project | None:
        column = self.column_of(task)
        return self.project_for_column(column) if column else None

    def columns_in_project(self, project_id: UUID) -> list[Column]:
        """Columns of one project, by position."""
        return sorted(
            (c for c in self.columns if c.project_id == project_id),
            key=lambda c: c.position,
        )

    def tasks_in_column(self, column_id: UUID) -> list[Task]:
        return [t for t in self.tasks if t.column_id == column_id]

    def tasks_in_project(self, project_id: UUID) -> list[Task]:
        column_ids = {c.id for c in self.columns if c.project_id == project_id}
        return [t for t in self.tasks if t.column_id in column_ids]

    def label_names(self, task: Task) -> list[str]:
        """Names of the labels attached to a task, by name."""
        names = [self._labels_by_id[i].name for i in task.label_ids if i in self._labels_by_id]
        return sorted(names, key=str.lower)


async def load_catalog(store: TaskStorePort) -> Catalog:
    """Read a fresh catalog snapshot from the store."""
    projects, columns, labels, tasks = await asyncio.gather(
        store.list_projects(),
        store.list_columns(),
        store.list_labels(),
        store.list_tasks(),
    )
    return Catalog(
        projects=tuple(projects),
        columns=tuple(columns),
        labels=tuple(labels),
        tasks=tuple(tasks),
    )


@dataclass(frozen=True)
class EntitySet:
    """Board entities mentioned by one message.

    Each field keeps catalog order and holds an identity at most once.
    `priorities` holds zero or one level.
    """

    raw_message: str
    projects: tuple[Project, ...] = ()
    columns: tuple[Column, ...] = ()
    labels: tuple[Label, ...] = ()
    tasks: tuple[Task, ...] = ()
    priorities: tuple[Priority, ...] = ()

    @property
    def priority(self) -> Priority | None:
        return self.priorities[0] if self.priorities else None

    def counts(self) -> dict[str, int]:
        return {
            "projects": len(self.projects),
            "columns": len(self.columns),
            "labels": len(self.labels),
            "tasks": len(self.tasks),
            "priorities": len(self.priorities),
        }


def extract_priority(normalized: str) -> Priority | None:
    for pattern in _PRIORITY_PATTERNS:
        match = pattern.search(normalized)
        if match:
            return Priority(match.group(1))
    return None


def _mentioned(normalized: str, items: Iterable[Any], key: Callable[[Any], str]) -> list[Any]:
    found: list[Any] = []
    seen: set[UUID] = set()
    for item in items:
        name = normalize(key(item))
        if not name or item.id in seen:
            continue
        if name in normalized:
            found.append(item)
            seen.add(item.id)
    return found


def extract_entities(message: str, catalog: Catalog) -> EntitySet:
    """Find the projects, columns, labels, tasks and priority a message names.

    Column matches are restricted to matched projects when any project
    was named. Cue phrases such as "in <column>" or "tag <label>" need no
    special handling since the bare name is already a substring.
    """
    normalized = normalize(message)
    priority = extract_priority(normalized)

    projects = _mentioned(normalized, catalog.projects, lambda p: p.name)
    columns = _mentioned(normalized, catalog.columns, lambda c: c.name)
    if projects:
        project_ids = {p.id for p in projects}
        columns = [c for c in columns if c.project_id in project_ids]
    labels = _mentioned(normalized, catalog.labels, lambda lb: lb.name)
    tasks = _mentioned(normalized, catalog.tasks, lambda t: t.title)

    return EntitySet(
        raw_message=message,
        projects=tuple(projects),
        columns=tuple(columns),
        labels=tuple(labels),
        tasks=tuple(tasks),
        priorities=(priority,) if priority else (),
    )
