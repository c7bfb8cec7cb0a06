"""PostgreSQL adapter implementing TaskStorePort via SQLAlchemy.

- Uses async_sessionmaker for database access, one session per call
- Adapter implements Port interface; the interpreter is unchanged
- Overdue / due-today filters compare against the database CURRENT_DATE

Schema: migrations/versions/001_create_board_tables.py
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError

from src.infra.models import (
    ActivityModel,
    ColumnModel,
    LabelModel,
    ProjectModel,
    TaskModel,
)
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
    from uuid import UUID

    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)


class PgTaskStore(TaskStorePort):
    """PostgreSQL-backed implementation of TaskStorePort."""

    def __init__(self, *, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    # -- Reads --

    async def list_projects(self) -> list[Project]:
        stmt = sa.select(ProjectModel).order_by(sa.func.lower(ProjectModel.name))
        async with self._session_factory() as session:
            result = await session.scalars(stmt)
            rows = result.all()
        return [_row_to_project(row) for row in rows]

    async def list_columns(self, project_id: UUID | None = None) -> list[Column]:
        stmt = (
            sa.select(ColumnModel)
            .join(ProjectModel, ColumnModel.project_id == ProjectModel.id)
            .order_by(sa.func.lower(ProjectModel.name), ColumnModel.position)
        )
        if project_id is not None:
            stmt = stmt.where(ColumnModel.project_id == project_id)
        async with self._session_factory() as session:
            result = await session.scalars(stmt)
            rows = result.all()
        return [_row_to_column(row) for row in rows]

    async def list_labels(self) -> list[Label]:
        stmt = sa.select(LabelModel).order_by(sa.func.lower(LabelModel.name))
        async with self._session_factory() as session:
            result = await session.scalars(stmt)
            rows = result.all()
        return [_row_to_label(row) for row in rows]

    async def list_tasks(self, query: TaskQuery | None = None) -> list[Task]:
        query = query or TaskQuery()
        stmt = sa.select(TaskModel).order_by(TaskModel.created_at.desc(), TaskModel.id)

        if query.column_id is not None:
            stmt = stmt.where(TaskModel.column_id == query.column_id)
        if query.project_id is not None:
            stmt = stmt.join(ColumnModel, TaskModel.column_id == ColumnModel.id).where(
                ColumnModel.project_id == query.project_id
            )
        if query.label_name is not None:
            stmt = stmt.where(
                TaskModel.labels.any(
                    sa.func.lower(LabelModel.name) == query.label_name.lower()
                )
            )
        if query.priority is not None:
            stmt = stmt.where(TaskModel.priority == query.priority.value)
        if query.overdue:
            stmt = stmt.where(
                TaskModel.due_date.is_not(None),
                TaskModel.due_date < sa.func.current_date(),
            )
        if query.due_today:
            stmt = stmt.where(TaskModel.due_date == sa.func.current_date())
        if query.limit is not None:
            stmt = stmt.limit(query.limit)

        async with self._session_factory() as session:
            result = await session.scalars(stmt)
            rows = result.all()
        return [_row_to_task(row) for row in rows]

    async def get_label_by_name(self, name: str) -> Label | None:
        async with self._session_factory() as session:
            row = await self._label_row_by_name(session, name)
        return _row_to_label(row) if row is not None else None

    async def get_max_position(self, column_id: UUID) -> int:
        async with self._session_factory() as session:
            return await self._max_position(session, column_id)

    async def list_activity(self, task_id: UUID) -> list[ActivityEntry]:
        stmt = (
            sa.select(ActivityModel)
            .where(ActivityModel.task_id == task_id)
            .order_by(ActivityModel.created_at.desc())
        )
        async with self._session_factory() as session:
            result = await session.scalars(stmt)
            rows = result.all()
        return [_row_to_activity(row) for row in rows]

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
        now = datetime.now(UTC)
        async with self._session_factory() as session:
            if await session.get(ColumnModel, column_id) is None:
                raise NotFoundError("Column", str(column_id))
            position = await self._max_position(session, column_id) + POSITION_GAP
            model = TaskModel(
                id=uuid4(),
                column_id=column_id,
                title=title,
                description=description,
                priority=(priority or Priority.MEDIUM).value,
                position=position,
                due_date=due_date,
                created_at=now,
                updated_at=now,
            )
            session.add(model)
            await session.commit()
        return _row_to_task(model, label_ids=frozenset())

    async def update_task(
        self,
        task_id: UUID,
        *,
        title: str | None = None,
        priority: Priority | None = None,
        description: str | None = None,
        due_date: date | None = None,
    ) -> Task:
        async with self._session_factory() as session:
            row = await self._task_row(session, task_id)
            if title is not None:
                row.title = title
            if priority is not None:
                row.priority = priority.value
            if description is not None:
                row.description = description
            if due_date is not None:
                row.due_date = due_date
            row.updated_at = datetime.now(UTC)
            await session.commit()
        return _row_to_task(row)

    async def move_task(self, task_id: UUID, *, column_id: UUID, position: int) -> Task:
        async with self._session_factory() as session:
            row = await self._task_row(session, task_id)
            if await session.get(ColumnModel, column_id) is None:
                raise NotFoundError("Column", str(column_id))
            row.column_id = column_id
            row.position = position
            row.updated_at = datetime.now(UTC)
            await session.commit()
        return _row_to_task(row)

    async def delete_task(self, task_id: UUID) -> bool:
        async with self._session_factory() as session:
            row = await session.get(TaskModel, task_id)
            if row is None:
                return False
            await session.delete(row)
            await session.commit()
        return True

    async def add_label_to_task(self, task_id: UUID, label_id: UUID) -> bool:
        async with self._session_factory() as session:
            row = await self._task_row(session, task_id)
            label = await session.get(LabelModel, label_id)
            if label is None:
                raise NotFoundError("Label", str(label_id))
            if any(existing.id == label_id for existing in row.labels):
                return False
            row.labels.append(label)
            await session.commit()
        return True

    async def remove_label_from_task(self, task_id: UUID, label_id: UUID) -> bool:
        async with self._session_factory() as session:
            row = await self._task_row(session, task_id)
            kept = [label for label in row.labels if label.id != label_id]
            if len(kept) == len(row.labels):
                return False
            row.labels = kept
            await session.commit()
        return True

    async def create_label(self, name: str, color: str = DEFAULT_LABEL_COLOR) -> Label:
        async with self._session_factory() as session:
            if await self._label_row_by_name(session, name) is not None:
                msg = f"Label already exists: {name}"
                raise ConflictError(msg)
            model = LabelModel(id=uuid4(), name=name, color=color)
            session.add(model)
            try:
                await session.commit()
            except IntegrityError as exc:
                logger.warning("Label insert lost a race on name %r", name)
                msg = f"Label already exists: {name}"
                raise ConflictError(msg) from exc
        return _row_to_label(model)

    async def log_activity(
        self,
        task_id: UUID,
        action: ActivityAction,
        details: str,
        actor: str = "User",
    ) -> ActivityEntry:
        model = ActivityModel(
            id=uuid4(),
            task_id=task_id,
            action=action.value,
            details=details,
            actor=actor,
            created_at=datetime.now(UTC),
        )
        async with self._session_factory() as session:
            session.add(model)
            await session.commit()
        return _row_to_activity(model)

    # -- Internal --

    @staticmethod
    async def _task_row(session: AsyncSession, task_id: UUID) -> TaskModel:
        row = await session.get(TaskModel, task_id)
        if row is None:
            raise NotFoundError("Task", str(task_id))
        return row

    @staticmethod
    async def _label_row_by_name(session: AsyncSession, name: str) -> LabelModel | None:
        stmt = sa.select(LabelModel).where(sa.func.lower(LabelModel.name) == name.lower())
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def _max_position(session: AsyncSession, column_id: UUID) -> int:
        stmt = sa.select(sa.func.coalesce(sa.func.max(TaskModel.position), 0)).where(
            TaskModel.column_id == column_id
        )
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)


def _row_to_project(row: ProjectModel) -> Project:
    return Project(id=row.id, name=row.name, color=row.color, created_at=row.created_at)


def _row_to_column(row: ColumnModel) -> Column:
    return Column(id=row.id, project_id=row.project_id, name=row.name, position=row.position)


def _row_to_label(row: LabelModel) -> Label:
    return Label(id=row.id, name=row.name, color=row.color)


def _row_to_task(row: TaskModel, *, label_ids: frozenset[UUID] | None = None) -> Task:
    """Convert an ORM row to a domain Task.

    `label_ids` overrides the relationship for rows that were never loaded
    (a freshly added task has no labels yet).
    """
    if label_ids is None:
        label_ids = frozenset(label.id for label in row.labels)
    return Task(
        id=row.id,
        column_id=row.column_id,
        title=row.title,
        priority=Priority(row.priority),
        position=row.position,
        description=row.description,
        due_date=row.due_date,
        label_ids=label_ids,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _row_to_activity(row: ActivityModel) -> ActivityEntry:
    return ActivityEntry(
        id=row.id,
        task_id=row.task_id,
        action=ActivityAction(row.action),
        details=row.details,
        actor=row.actor,
        created_at=row.created_at,
    )
