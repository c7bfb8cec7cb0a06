"""TaskStorePort - Board persistence interface consumed by the interpreter.

Hard dependency of the interpreter. Every command starts by reading a
catalog snapshot through this port and finishes with zero or more writes.
Day-1 implementation: InMemoryTaskStore.
Real implementation: PgTaskStore (PostgreSQL via SQLAlchemy).

Implementations are expected to tolerate concurrent reads and serialize
writes per entity; the interpreter adds no locking of its own.
Unknown ids raise src.shared.errors.NotFoundError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import date
    from uuid import UUID

    from src.shared.types import (
        ActivityAction,
        ActivityEntry,
        Column,
        Label,
        Priority,
        Project,
        Task,
        TaskQuery,
    )


class TaskStorePort(ABC):
    """Port: board reads and writes."""

    # -- Reads --

    @abstractmethod
    async def list_projects(self) -> list[Project]:
        """List all projects ordered by name."""

    @abstractmethod
    async def list_columns(self, project_id: UUID | None = None) -> list[Column]:
        """List columns ordered by project name, then position.

        Args:
            project_id: Restrict to one project's columns.
        """

    @abstractmethod
    async def list_labels(self) -> list[Label]:
        """List all labels ordered by name."""

    @abstractmethod
    async def list_tasks(self, query: TaskQuery | None = None) -> list[Task]:
        """List tasks matching a query, newest first.

        Args:
            query: Optional filter; None returns every task.
        """

    @abstractmethod
    async def get_label_by_name(self, name: str) -> Label | None:
        """Case-insensitive label lookup."""

    @abstractmethod
    async def get_max_position(self, column_id: UUID) -> int:
        """Highest task position in a column (0 when empty)."""

    @abstractmethod
    async def list_activity(self, task_id: UUID) -> list[ActivityEntry]:
        """Activity entries for a task, newest first."""

    # -- Writes --

    @abstractmethod
    async def create_task(
        self,
        column_id: UUID,
        title: str,
        *,
        priority: Priority | None = None,
        description: str | None = None,
        due_date: date | None = None,
    ) -> Task:
        """Create a task at the end of a column.

        Returns:
            The stored task, positioned after the current last task.
        """

    @abstractmethod
    async def update_task(
        self,
        task_id: UUID,
        *,
        title: str | None = None,
        priority: Priority | None = None,
        description: str | None = None,
        due_date: date | None = None,
    ) -> Task:
        """Update the given fields; None leaves a field unchanged."""

    @abstractmethod
    async def move_task(self, task_id: UUID, *, column_id: UUID, position: int) -> Task:
        """Place a task in a column at a position."""

    @abstractmethod
    async def delete_task(self, task_id: UUID) -> bool:
        """Delete a task. Returns False if it no longer existed."""

    @abstractmethod
    async def add_label_to_task(self, task_id: UUID, label_id: UUID) -> bool:
        """Attach a label. Returns False if it was already attached."""

    @abstractmethod
    async def remove_label_from_task(self, task_id: UUID, label_id: UUID) -> bool:
        """Detach a label. Returns False if it was not attached."""

    @abstractmethod
    async def create_label(self, name: str, color: str = "#6B7280") -> Label:
        """Create a label. Raises ConflictError on a duplicate name."""

    @abstractmethod
    async def log_activity(
        self,
        task_id: UUID,
        action: ActivityAction,
        details: str,
        actor: str = "User",
    ) -> ActivityEntry:
        """Append an activity-log entry for a task."""
