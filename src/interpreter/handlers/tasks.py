"""Task lifecycle handlers: create, move, delete, re-prioritize.

Every handler resolves its targets and arguments first and returns a
failure before touching the store; writes come last.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.interpreter.context import for_each_task
from src.interpreter.extraction import (
    extract_create_title,
    extract_delete_subject,
    extract_destinations,
    extract_move_subject,
    extract_priority_subject,
)
from src.interpreter.formatting import column_label, serialize_task
from src.interpreter.fuzzy import MatchResult, find_best_match
from src.interpreter.normalize import normalize
from src.interpreter.results import ActionResult, ActionTag, FailureReason
from src.interpreter.scope import resolve_tasks, structural_tasks
from src.shared.types import POSITION_GAP, ActivityAction, Priority

if TYPE_CHECKING:
    from uuid import UUID

    from src.interpreter.context import CommandContext
    from src.shared.types import Column, Task

logger = logging.getLogger(__name__)

CANONICAL_COLUMN_NAMES = ("to do", "todo", "in progress", "done", "testing", "review")

CREATE_USAGE = (
    "Please provide a task title. Use quotes for the title, like:\n"
    "• \"Create task 'Fix login bug' in To Do\"\n"
    '• "Create task called Fix bug in To Do"'
)


# -- Create --


def _pick_create_column(ctx: CommandContext, remainder: str) -> Column | None:
    """Column for a new task, judged on the message with the title removed."""
    catalog = ctx.catalog
    projects = [p for p in ctx.entities.projects if normalize(p.name) in remainder]
    columns = [c for c in ctx.entities.columns if normalize(c.name) in remainder]

    if projects:
        project_columns = catalog.columns_in_project(projects[0].id)
        named = {c.id for c in columns}
        for column in project_columns:
            if column.id in named:
                return column
        padded = f" {remainder} "
        for keyword in CANONICAL_COLUMN_NAMES:
            if f" {keyword} " in padded:
                match = find_best_match(keyword, project_columns)
                if match:
                    return match.item
        return project_columns[0] if project_columns else None

    if columns:
        return columns[0]
    todo = find_best_match("to do", catalog.columns)
    if todo:
        return todo.item
    return catalog.columns[0] if catalog.columns else None


async def handle_create(ctx: CommandContext) -> ActionResult:
    catalog = ctx.catalog
    context_names = [c.name for c in catalog.columns] + [p.name for p in catalog.projects]
    title = extract_create_title(ctx.message, context_names)
    if not title:
        return ActionResult.fail(CREATE_USAGE, FailureReason.MISSING_ARGUMENT)

    remainder = normalize(ctx.message.replace(title, " ", 1))
    column = _pick_create_column(ctx, remainder)
    if column is None:
        return ActionResult.fail(
            "No column found. Please create a project with columns first.",
            FailureReason.NO_STRUCTURAL_TARGET,
        )

    priority = ctx.entities.priority or Priority.MEDIUM
    labels = [lb for lb in ctx.entities.labels if normalize(lb.name) in remainder]

    store = ctx.store
    task = await store.create_task(column.id, title, priority=priority)
    await store.log_activity(task.id, ActivityAction.CREATED, "Task was created")
    for label in labels:
        await store.add_label_to_task(task.id, label.id)
        await store.log_activity(
            task.id, ActivityAction.LABEL_ADDED, f'Label "{label.name}" was added'
        )

    logger.info("Created task %s in column %s", task.id, column.id)
    data = {"task": serialize_task(task, catalog)}
    data["task"]["labels"] = sorted((lb.name for lb in labels), key=str.lower)
    return ActionResult.ok(
        f'✅ Created task "{title}" in {column_label(column, catalog)}.',
        ActionTag.CREATE,
        data,
    )


# -- Move / mark done --


def _same_project_first(columns: list[Column], project_id: UUID | None) -> list[Column]:
    return sorted(columns, key=lambda c: c.project_id != project_id)


def _target_column(
    ctx: CommandContext,
    *,
    project_id: UUID | None,
    exclude: set[UUID],
) -> Column | None:
    """Destination column for a move.

    Tries the text after each "to"/"into" against every column, then a
    named column that is not excluded, then a "done" column when the
    message asks for completion. Columns of `project_id` win ties.
    """
    everywhere = _same_project_first(list(ctx.catalog.columns), project_id)
    candidates = [c for c in everywhere if c.id not in exclude]

    best: MatchResult[Column] | None = None
    for fragment in reversed(extract_destinations(ctx.message)):
        match = find_best_match(fragment, everywhere)
        if match and (best is None or match.score > best.score):
            best = match
    if best is not None:
        return best.item

    named = _same_project_first(
        [c for c in ctx.entities.columns if c.id not in exclude], project_id
    )
    if named:
        return named[-1] if ctx.bulk else named[0]

    if ctx.mentions("done", "complete", "finish"):
        match = find_best_match("done", candidates)
        if match:
            return match.item
    return None


async def _move_all(
    ctx: CommandContext,
    tasks: list[Task],
    target: Column,
    scope: str = "",
) -> ActionResult:
    catalog = ctx.catalog
    store = ctx.store
    next_position = await store.get_max_position(target.id) + POSITION_GAP

    async def move(task: Task) -> bool:
        nonlocal next_position
        source = catalog.column_of(task)
        await store.move_task(task.id, column_id=target.id, position=next_position)
        next_position += POSITION_GAP
        source_name = source.name if source else "Unknown"
        await store.log_activity(
            task.id, ActivityAction.MOVED, f'Moved from "{source_name}" to "{target.name}"'
        )
        return True

    outcome = await for_each_task(tasks, move)
    if outcome.changed == 0:
        return ActionResult.fail(
            f'Could not move any tasks to "{target.name}".',
            FailureReason.STORE_FAILURE,
            action=ActionTag.ERROR,
            data=outcome.as_data(),
        )

    logger.info("Moved %d task(s) to column %s", outcome.changed, target.id)
    data = {"column_id": str(target.id), **outcome.as_data()}
    if len(tasks) == 1:
        task = tasks[0]
        source = catalog.column_of(task)
        data["task_id"] = str(task.id)
        message = (
            f'✅ Moved "{task.title}" from "{source.name if source else "Unknown"}" '
            f'to "{target.name}".'
        )
    else:
        message = f'✅ Moved {outcome.changed} task(s){scope} to "{target.name}".'
    return ActionResult.ok(message, ActionTag.MOVE, data)


def _move_sources(named: list[Column], target: Column) -> list[Column]:
    """Named columns a bulk move empties into `target`.

    A column sharing the target's name is never a source. A column of
    another project is skipped when the target's project has a column
    of the same name.
    """
    local = {normalize(c.name) for c in named if c.project_id == target.project_id}
    return [
        c
        for c in named
        if normalize(c.name) != normalize(target.name)
        and (c.project_id == target.project_id or normalize(c.name) not in local)
    ]


async def handle_move(ctx: CommandContext) -> ActionResult:
    """MOVE and MARK_DONE."""
    catalog = ctx.catalog
    entities = ctx.entities

    if ctx.bulk:
        if entities.projects:
            project_id = entities.projects[0].id
        elif entities.columns:
            project_id = entities.columns[0].project_id
        else:
            project_id = None
        target = _target_column(ctx, project_id=project_id, exclude=set())
        if target is None:
            return ActionResult.fail(
                'Please specify the target column. Example: "Move all tasks in Review to Done"',
                FailureReason.MISSING_ARGUMENT,
            )
        sources = _move_sources(entities.columns, target)
        if sources:
            tasks = [t for c in sources for t in catalog.tasks_in_column(c.id)]
            scope = f' in "{sources[0].name}" column'
        else:
            tasks = [t for p in entities.projects for t in catalog.tasks_in_project(p.id)]
            scope = f' in "{entities.projects[0].name}" project' if entities.projects else ""
        tasks = [t for t in tasks if t.column_id != target.id]
        if not tasks:
            return ActionResult.fail(
                "No tasks found to move. Please specify a column or project.",
                FailureReason.NO_TARGET,
            )
        return await _move_all(ctx, tasks, target, scope)

    subject = extract_move_subject(ctx.message)
    task: Task | None = None
    if entities.tasks:
        match = find_best_match(subject, entities.tasks, key=lambda t: t.title)
        task = match.item if match else entities.tasks[0]
    else:
        found = resolve_tasks(entities, catalog, bulk=False, fragment=subject or None)
        task = found[0] if found else None
    if task is None:
        return ActionResult.fail(
            "Could not find the task. Please specify the task name more clearly.",
            FailureReason.NO_TARGET,
        )

    current = catalog.column_of(task)
    target = _target_column(
        ctx,
        project_id=current.project_id if current else None,
        exclude={task.column_id},
    )
    if target is None:
        return ActionResult.fail(
            'Please specify the target column. Example: "Move task X to Done"',
            FailureReason.MISSING_ARGUMENT,
        )
    if target.id == task.column_id:
        return ActionResult.ok(
            f'"{task.title}" is already in "{target.name}".',
            ActionTag.MOVE,
            {"task_id": str(task.id), "column_id": str(target.id), "task_count": 0},
        )
    return await _move_all(ctx, [task], target)


# -- Delete --


async def handle_delete(ctx: CommandContext) -> ActionResult:
    if ctx.bulk:
        tasks = structural_tasks(ctx.entities, ctx.catalog)
    else:
        subject = extract_delete_subject(ctx.message)
        tasks = resolve_tasks(ctx.entities, ctx.catalog, bulk=False, fragment=subject or None)

    if not tasks:
        return ActionResult.fail(
            "No tasks found to delete. Please specify which task(s) to delete.",
            FailureReason.NO_TARGET,
        )
    if len(tasks) > 1 and not ctx.confirm:
        return ActionResult.fail(
            f"⚠️ This would delete {len(tasks)} tasks. Please be more specific, "
            "or send the same command again with confirmation.",
            FailureReason.AMBIGUOUS_BULK_DESTRUCTIVE,
            data={"task_count": len(tasks)},
        )

    store = ctx.store

    async def delete(task: Task) -> bool:
        if not await store.delete_task(task.id):
            return False
        details = f'Task "{task.title}" was deleted'
        await store.log_activity(task.id, ActivityAction.DELETED, details)
        return True

    outcome = await for_each_task(tasks, delete)
    if outcome.changed == 0 and outcome.failed:
        return ActionResult.fail(
            "Could not delete the task(s).",
            FailureReason.STORE_FAILURE,
            action=ActionTag.ERROR,
            data=outcome.as_data(),
        )
    if outcome.changed == 0:
        return ActionResult.fail(
            "The task(s) no longer exist.",
            FailureReason.NO_TARGET,
            data=outcome.as_data(),
        )

    logger.info("Deleted %d task(s)", outcome.changed)
    data = {"deleted_count": outcome.changed}
    if outcome.failed:
        data["failed_count"] = outcome.failed
    return ActionResult.ok(f"✅ Deleted {outcome.changed} task(s).", ActionTag.DELETE, data)


# -- Priority --


async def handle_set_priority(ctx: CommandContext) -> ActionResult:
    priority = ctx.entities.priority
    if priority is None:
        return ActionResult.fail(
            "Please specify a priority level (high, medium, or low).",
            FailureReason.MISSING_ARGUMENT,
        )

    subject = extract_priority_subject(ctx.message)
    tasks = resolve_tasks(ctx.entities, ctx.catalog, bulk=ctx.bulk, fragment=subject or None)
    if not tasks:
        return ActionResult.fail(
            "No tasks found. Please specify which task(s) to update.",
            FailureReason.NO_TARGET,
        )

    store = ctx.store

    async def reprioritize(task: Task) -> bool:
        await store.update_task(task.id, priority=priority)
        await store.log_activity(
            task.id,
            ActivityAction.PRIORITY_CHANGED,
            f'Priority changed from "{task.priority.value}" to "{priority.value}"',
        )
        return True

    outcome = await for_each_task(tasks, reprioritize)
    if outcome.changed == 0:
        return ActionResult.fail(
            "Could not update the task(s).",
            FailureReason.STORE_FAILURE,
            action=ActionTag.ERROR,
            data=outcome.as_data(),
        )

    logger.info("Set priority %s on %d task(s)", priority.value, outcome.changed)
    return ActionResult.ok(
        f'✅ Updated priority to "{priority.value}" for {outcome.changed} task(s).',
        ActionTag.UPDATE,
        {"priority": priority.value, **outcome.as_data()},
    )
