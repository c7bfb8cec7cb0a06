"""SQLAlchemy ORM models for the task board.

Maps to migration DDL in migrations/versions/:
  001_create_board_tables.py -> ProjectModel, ColumnModel, TaskModel,
                                LabelModel, task_labels, ActivityModel

These models live in the Infrastructure layer and back PgTaskStore.
The interpreter MUST NOT import this module directly; it sees only the
domain types in src.shared.types.
"""

from __future__ import annotations

import uuid as _uuid  # noqa: TC003 -- SQLAlchemy resolves Mapped[] annotations at runtime
from datetime import date, datetime  # noqa: TC003

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

_UUID = postgresql.UUID(as_uuid=True)
_NOW = sa.text("now()")
_GEN_UUID = sa.text("gen_random_uuid()")


class Base(DeclarativeBase):
    """Declarative base for all board ORM models."""


task_labels = sa.Table(
    "task_labels",
    Base.metadata,
    sa.Column(
        "task_id",
        _UUID,
        sa.ForeignKey("tasks.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    sa.Column(
        "label_id",
        _UUID,
        sa.ForeignKey("labels.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class ProjectModel(Base):
    __tablename__ = "projects"

    id: Mapped[_uuid.UUID] = mapped_column(_UUID, primary_key=True, server_default=_GEN_UUID)
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    color: Mapped[str] = mapped_column(sa.String(16), nullable=False, server_default="#3B82F6")
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=_NOW,
    )

    columns: Mapped[list[ColumnModel]] = relationship(
        back_populates="project",
        cascade="all, delete-orphan",
    )


class ColumnModel(Base):
    """Board column. Table is board_columns to keep clear of the SQL keyword."""

    __tablename__ = "board_columns"

    id: Mapped[_uuid.UUID] = mapped_column(_UUID, primary_key=True, server_default=_GEN_UUID)
    project_id: Mapped[_uuid.UUID] = mapped_column(
        _UUID,
        sa.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    position: Mapped[int] = mapped_column(sa.Integer(), nullable=False, server_default="0")

    project: Mapped[ProjectModel] = relationship(back_populates="columns")

    __table_args__ = (sa.Index("ix_board_columns_project_id", "project_id", "position"),)


class LabelModel(Base):
    __tablename__ = "labels"

    id: Mapped[_uuid.UUID] = mapped_column(_UUID, primary_key=True, server_default=_GEN_UUID)
    name: Mapped[str] = mapped_column(sa.String(128), nullable=False)
    color: Mapped[str] = mapped_column(sa.String(16), nullable=False, server_default="#6B7280")


sa.Index("ix_labels_lower_name", sa.func.lower(LabelModel.name), unique=True)


class TaskModel(Base):
    __tablename__ = "tasks"

    id: Mapped[_uuid.UUID] = mapped_column(_UUID, primary_key=True, server_default=_GEN_UUID)
    column_id: Mapped[_uuid.UUID] = mapped_column(
        _UUID,
        sa.ForeignKey("board_columns.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    priority: Mapped[str] = mapped_column(
        sa.String(16),
        nullable=False,
        server_default="medium",
    )
    position: Mapped[int] = mapped_column(sa.Integer(), nullable=False, server_default="0")
    due_date: Mapped[date | None] = mapped_column(sa.Date(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=_NOW,
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=_NOW,
    )

    labels: Mapped[list[LabelModel]] = relationship(secondary=task_labels, lazy="selectin")

    __table_args__ = (
        sa.CheckConstraint("priority IN ('low', 'medium', 'high')", name="ck_tasks_priority"),
        sa.Index("ix_tasks_column_id", "column_id", "position"),
        sa.Index("ix_tasks_created_at", "created_at"),
    )


class ActivityModel(Base):
    """Per-task activity trail.

    task_id carries no foreign key so entries outlive the deleted task.
    """

    __tablename__ = "activities"

    id: Mapped[_uuid.UUID] = mapped_column(_UUID, primary_key=True, server_default=_GEN_UUID)
    task_id: Mapped[_uuid.UUID] = mapped_column(_UUID, nullable=False)
    action: Mapped[str] = mapped_column(sa.String(32), nullable=False)
    details: Mapped[str] = mapped_column(sa.Text(), nullable=False)
    actor: Mapped[str] = mapped_column(sa.String(128), nullable=False, server_default="User")
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=_NOW,
    )

    __table_args__ = (sa.Index("ix_activities_task_id", "task_id", "created_at"),)
