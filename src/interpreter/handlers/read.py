"""Read-only handlers: help, board summary and task search."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from src.interpreter.formatting import (
    HELP_TEXT,
    format_summary,
    format_task_list,
    serialize_task,
)
from src.interpreter.results import ActionResult, ActionTag
from src.shared.types import Priority, TaskQuery

if TYPE_CHECKING:
    from src.interpreter.context import CommandContext

SEARCH_LIMIT = 50


async def handle_help(ctx: CommandContext) -> ActionResult:
    return ActionResult.ok(HELP_TEXT, ActionTag.HELP)


async def handle_info(ctx: CommandContext) -> ActionResult:
    catalog = ctx.catalog
    overdue, due_today = await asyncio.gather(
        ctx.store.list_tasks(TaskQuery(overdue=True)),
        ctx.store.list_tasks(TaskQuery(due_today=True)),
    )
    stats = {
        "total_tasks": len(catalog.tasks),
        "overdue": len(overdue),
        "due_today": len(due_today),
        "high_priority": sum(1 for t in catalog.tasks if t.priority == Priority.HIGH),
    }
    projects = [
        {"id": str(p.id), "name": p.name, "task_count": len(catalog.tasks_in_project(p.id))}
        for p in catalog.projects
    ]
    message = format_summary(
        [(p["name"], p["task_count"]) for p in projects],
        total=stats["total_tasks"],
        overdue=stats["overdue"],
        due_today=stats["due_today"],
        high_priority=stats["high_priority"],
    )
    return ActionResult.ok(message, ActionTag.INFO, {"projects": projects, "stats": stats})


def _search_query(ctx: CommandContext) -> tuple[TaskQuery, str]:
    """First applicable filter: overdue, due today, priority, label, project, column."""
    entities = ctx.entities
    if ctx.mentions("overdue"):
        return TaskQuery(overdue=True, limit=SEARCH_LIMIT), "Overdue Tasks"
    if ctx.mentions("today"):
        return TaskQuery(due_today=True, limit=SEARCH_LIMIT), "Tasks Due Today"
    if entities.priority is not None:
        level = entities.priority
        title = f"{level.value.capitalize()} Priority Tasks"
        return TaskQuery(priority=level, limit=SEARCH_LIMIT), title
    if entities.labels:
        label = entities.labels[0]
        title = f'Tasks with "{label.name}" label'
        return TaskQuery(label_name=label.name, limit=SEARCH_LIMIT), title
    if entities.projects:
        project = entities.projects[0]
        return TaskQuery(project_id=project.id, limit=SEARCH_LIMIT), f"Tasks in {project.name}"
    if entities.columns:
        column = entities.columns[0]
        title = f'Tasks in "{column.name}" column'
        return TaskQuery(column_id=column.id, limit=SEARCH_LIMIT), title
    return TaskQuery(limit=SEARCH_LIMIT), "All Tasks"


async def handle_search(ctx: CommandContext) -> ActionResult:
    query, title = _search_query(ctx)
    tasks = await ctx.store.list_tasks(query)
    data = {
        "tasks": [serialize_task(t, ctx.catalog) for t in tasks],
        "count": len(tasks),
    }
    return ActionResult.ok(format_task_list(tasks, ctx.catalog, title), ActionTag.SEARCH, data)
