"""Shared board domain types used across layers.

These types flow through the TaskStorePort interface and must remain
stable. Instances are immutable snapshots: store writes return a new
instance rather than mutating the one the caller holds.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date, datetime
    from uuid import UUID

# Gap between neighbouring task positions in a column; new tasks go last.
POSITION_GAP = 1000
DEFAULT_LABEL_COLOR = "#6B7280"


class Priority(str, Enum):
    """Task priority levels, lowest first."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActivityAction(str, Enum):
    """Kinds of activity-log entries written per task."""

    CREATED = "created"
    UPDATED = "updated"
    MOVED = "moved"
    PRIORITY_CHANGED = "priority_changed"
    LABEL_ADDED = "label_added"
    LABEL_REMOVED = "label_removed"
    DELETED = "deleted"


@dataclass(frozen=True)
class Project:
    """A board project; owns an ordered set of columns."""

    id: UUID
    name: str
    color: str = "#3B82F6"
    created_at: datetime | None = None


@dataclass(frozen=True)
class Column:
    """A column inside a project, ordered by position."""

    id: UUID
    project_id: UUID
    name: str
    position: int = 0


@dataclass(frozen=True)
class Label:
    """A board-wide label; names are unique case-insensitively."""

    id: UUID
    name: str
    color: str = DEFAULT_LABEL_COLOR


@dataclass(frozen=True)
class Task:
    """A task card living in exactly one column."""

    id: UUID
    column_id: UUID
    title: str
    priority: Priority = Priority.MEDIUM
    position: int = 0
    description: str | None = None
    due_date: date | None = None
    label_ids: frozenset[UUID] = field(default_factory=frozenset)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ActivityEntry:
    """One line of a task's activity log."""

    id: UUID
    task_id: UUID
    action: ActivityAction
    details: str
    actor: str = "User"
    created_at: datetime | None = None


@dataclass(frozen=True)
class TaskQuery:
    """Task filter for TaskStorePort.list_tasks.

    All set fields are combined with AND. `overdue` and `due_today` are
    evaluated against the store's notion of today.
    """

    column_id: UUID | None = None
    project_id: UUID | None = None
    label_name: str | None = None
    priority: Priority | None = None
    overdue: bool = False
    due_today: bool = False
    limit: int | None = None


__all__ = [
    "DEFAULT_LABEL_COLOR",
    "POSITION_GAP",
    "ActivityAction",
    "ActivityEntry",
    "Column",
    "Label",
    "Priority",
    "Project",
    "Task",
    "TaskQuery",
]
