"""Create projects, board_columns, labels, tasks, task_labels, activities.

Revision ID: 001_board
Revises: None
Create Date: 2026-10-18

Rollback: reverse-drop activities, task_labels, tasks, labels, board_columns, projects
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "001_board"
down_revision = None
branch_labels = None
depends_on = None

_UUID = postgresql.UUID(as_uuid=True)
_NOW = sa.text("now()")
_GEN_UUID = sa.text("gen_random_uuid()")


def upgrade() -> None:
    # --- projects ---
    op.create_table(
        "projects",
        sa.Column("id", _UUID, primary_key=True, server_default=_GEN_UUID),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("color", sa.String(16), nullable=False, server_default="#3B82F6"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=_NOW,
        ),
    )

    # --- board_columns ---
    op.create_table(
        "board_columns",
        sa.Column("id", _UUID, primary_key=True, server_default=_GEN_UUID),
        sa.Column(
            "project_id",
            _UUID,
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index(
        "ix_board_columns_project_id",
        "board_columns",
        ["project_id", "position"],
    )

    # --- labels ---
    op.create_table(
        "labels",
        sa.Column("id", _UUID, primary_key=True, server_default=_GEN_UUID),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("color", sa.String(16), nullable=False, server_default="#6B7280"),
    )
    op.create_index(
        "ix_labels_lower_name",
        "labels",
        [sa.text("lower(name)")],
        unique=True,
    )

    # --- tasks ---
    op.create_table(
        "tasks",
        sa.Column("id", _UUID, primary_key=True, server_default=_GEN_UUID),
        sa.Column(
            "column_id",
            _UUID,
            sa.ForeignKey("board_columns.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("priority", sa.String(16), nullable=False, server_default="medium"),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=_NOW,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=_NOW,
        ),
        sa.CheckConstraint(
            "priority IN ('low', 'medium', 'high')",
            name="ck_tasks_priority",
        ),
    )
    op.create_index("ix_tasks_column_id", "tasks", ["column_id", "position"])
    op.create_index("ix_tasks_created_at", "tasks", ["created_at"])

    # --- task_labels ---
    op.create_table(
        "task_labels",
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

    # --- activities ---
    # No FK on task_id: the trail of a deleted task is kept.
    op.create_table(
        "activities",
        sa.Column("id", _UUID, primary_key=True, server_default=_GEN_UUID),
        sa.Column("task_id", _UUID, nullable=False),
        sa.Column("action", sa.String(32), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("actor", sa.String(128), nullable=False, server_default="User"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=_NOW,
        ),
    )
    op.create_index(
        "ix_activities_task_id",
        "activities",
        ["task_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_table("activities")
    op.drop_table("task_labels")
    op.drop_table("tasks")
    op.drop_table("labels")
    op.drop_table("board_columns")
    op.drop_table("projects")
