"""Title edits: bulk prefix/suffix and single-task rename."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.interpreter.context import for_each_task
from src.interpreter.extraction import extract_prefix, extract_rename, extract_suffix
from src.interpreter.formatting import context_suffix
from src.interpreter.normalize import normalize
from src.interpreter.results import ActionResult, ActionTag, FailureReason
from src.interpreter.scope import match_task, structural_tasks
from src.shared.types import ActivityAction

if TYPE_CHECKING:
    from src.interpreter.context import CommandContext
    from src.shared.types import Task

logger = logging.getLogger(__name__)


def _title_targets(ctx: CommandContext) -> list[Task]:
    """Tasks in the named columns, else projects, else the named tasks."""
    return structural_tasks(ctx.entities, ctx.catalog) or list(ctx.entities.tasks)


async def _edit_titles(ctx: CommandContext, text: str, *, prepend: bool) -> ActionResult:
    tasks = _title_targets(ctx)
    if not tasks:
        example = (
            "Before all To Do tasks add 'Prefix - '"
            if prepend
            else "After all Done tasks add ' - Completed'"
        )
        return ActionResult.fail(
            f'No tasks found. Please specify a column or project. Example: "{example}"',
            FailureReason.NO_TARGET,
        )

    store = ctx.store
    verb = "prefixed" if prepend else "suffixed"

    async def edit(task: Task) -> bool:
        if prepend and task.title.startswith(text):
            return False
        if not prepend and task.title.endswith(text):
            return False
        title = text + task.title if prepend else task.title + text
        await store.update_task(task.id, title=title)
        await store.log_activity(task.id, ActivityAction.UPDATED, f'Title {verb} with "{text}"')
        return True

    outcome = await for_each_task(tasks, edit)
    if outcome.changed == 0 and outcome.failed:
        return ActionResult.fail(
            "Could not update the task titles.",
            FailureReason.STORE_FAILURE,
            action=ActionTag.ERROR,
            data=outcome.as_data(),
        )

    logger.info("Title %s on %d of %d task(s)", verb, outcome.changed, len(tasks))
    where = "before" if prepend else "after"
    key = "prefix" if prepend else "suffix"
    scope = context_suffix(ctx.entities)
    return ActionResult.ok(
        f'✅ Added "{text}" {where} {outcome.changed} task title(s){scope}.',
        ActionTag.UPDATE,
        {key: text, **outcome.as_data()},
    )


async def handle_prepend_title(ctx: CommandContext) -> ActionResult:
    text = extract_prefix(ctx.message)
    if not text:
        return ActionResult.fail(
            "Please specify the text to add. Example: \"Before all To Do tasks add 'Kaustav - '\"",
            FailureReason.MISSING_ARGUMENT,
        )
    return await _edit_titles(ctx, text, prepend=True)


async def handle_append_title(ctx: CommandContext) -> ActionResult:
    text = extract_suffix(ctx.message)
    if not text:
        return ActionResult.fail(
            "Please specify the text to add. Example: \"After all Done tasks add ' - Completed'\"",
            FailureReason.MISSING_ARGUMENT,
        )
    return await _edit_titles(ctx, text, prepend=False)


def _rename_target(ctx: CommandContext, reference: str) -> Task | None:
    wanted = normalize(reference)
    if wanted:
        for task in sorted(ctx.entities.tasks, key=lambda t: len(t.title), reverse=True):
            if normalize(task.title) in wanted:
                return task
        return match_task(reference, ctx.catalog)
    return ctx.entities.tasks[0] if ctx.entities.tasks else None


async def handle_rename_title(ctx: CommandContext) -> ActionResult:
    reference, new_title = extract_rename(ctx.message)
    if not new_title:
        return ActionResult.fail(
            'Please give the new title. Example: "Rename Fix bug to Fix login bug"',
            FailureReason.MISSING_ARGUMENT,
        )

    task = _rename_target(ctx, reference)
    if task is None:
        return ActionResult.fail(
            "Could not find the task to rename. Please specify the task name more clearly.",
            FailureReason.NO_TARGET,
        )

    data = {"task_id": str(task.id), "title": new_title}
    if task.title == new_title:
        return ActionResult.ok(
            f'"{task.title}" already has that title.', ActionTag.UPDATE, {**data, "task_count": 0}
        )

    await ctx.store.update_task(task.id, title=new_title)
    await ctx.store.log_activity(
        task.id, ActivityAction.UPDATED, f'Title changed from "{task.title}" to "{new_title}"'
    )
    logger.info("Renamed task %s", task.id)
    return ActionResult.ok(
        f'✅ Renamed "{task.title}" to "{new_title}".',
        ActionTag.UPDATE,
        {**data, "task_count": 1},
    )
