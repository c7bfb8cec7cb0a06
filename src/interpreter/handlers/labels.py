"""Tag and untag handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.interpreter.context import for_each_task
from src.interpreter.extraction import (
    extract_label_name,
    extract_tag_target,
    extract_untag_target,
)
from src.interpreter.formatting import context_suffix
from src.interpreter.results import ActionResult, ActionTag, FailureReason
from src.interpreter.scope import resolve_tasks
from src.shared.types import ActivityAction

if TYPE_CHECKING:
    from src.interpreter.context import CommandContext
    from src.shared.types import Label, Task

logger = logging.getLogger(__name__)


async def handle_add_tag(ctx: CommandContext) -> ActionResult:
    """Attach a label to the resolved tasks.

    An unknown label name is created, but only once targets are known,
    so a command that fails never leaves a stray label behind.
    """
    store = ctx.store
    label: Label | None = ctx.entities.labels[0] if ctx.entities.labels else None
    label_name = label.name if label else extract_label_name(ctx.message)
    if not label_name:
        return ActionResult.fail(
            'Please specify a label name. Example: "Add tag Bug to all tasks in To Do"',
            FailureReason.MISSING_ARGUMENT,
        )
    if label is None:
        label = await store.get_label_by_name(label_name)

    fragment = extract_tag_target(ctx.message)
    tasks = resolve_tasks(
        ctx.entities,
        ctx.catalog,
        bulk=ctx.bulk,
        fragment=fragment or None,
        whole_board=True,
    )
    if not tasks:
        return ActionResult.fail(
            "No tasks found to add the label to. Please specify a task or column.",
            FailureReason.NO_TARGET,
        )

    if label is None:
        label = await store.create_label(label_name)
        logger.info("Created label %s (%s)", label.name, label.id)
    attached = label

    async def tag(task: Task) -> bool:
        if not await store.add_label_to_task(task.id, attached.id):
            return False
        details = f'Label "{attached.name}" was added'
        await store.log_activity(task.id, ActivityAction.LABEL_ADDED, details)
        return True

    outcome = await for_each_task(tasks, tag)
    if outcome.changed == 0 and outcome.failed:
        return ActionResult.fail(
            f'Could not add label "{attached.name}".',
            FailureReason.STORE_FAILURE,
            action=ActionTag.ERROR,
            data=outcome.as_data(),
        )

    logger.info("Label %s added to %d task(s)", attached.id, outcome.changed)
    return ActionResult.ok(
        f'✅ Added label "{attached.name}" to {outcome.changed} task(s)'
        f"{context_suffix(ctx.entities)}.",
        ActionTag.UPDATE,
        {"label_id": str(attached.id), **outcome.as_data()},
    )


async def handle_remove_tag(ctx: CommandContext) -> ActionResult:
    if not ctx.entities.labels:
        return ActionResult.fail(
            'Please specify which label to remove. Example: "Remove label Bug from task X"',
            FailureReason.MISSING_ARGUMENT,
        )
    label = ctx.entities.labels[0]

    fragment = extract_untag_target(ctx.message)
    tasks = resolve_tasks(
        ctx.entities,
        ctx.catalog,
        bulk=ctx.bulk,
        fragment=fragment or None,
        whole_board=True,
    )
    if not tasks:
        return ActionResult.fail(
            "No tasks found. Please specify tasks to remove the label from.",
            FailureReason.NO_TARGET,
        )

    store = ctx.store

    async def untag(task: Task) -> bool:
        if not await store.remove_label_from_task(task.id, label.id):
            return False
        details = f'Label "{label.name}" was removed'
        await store.log_activity(task.id, ActivityAction.LABEL_REMOVED, details)
        return True

    outcome = await for_each_task(tasks, untag)
    if outcome.changed == 0 and outcome.failed:
        return ActionResult.fail(
            f'Could not remove label "{label.name}".',
            FailureReason.STORE_FAILURE,
            action=ActionTag.ERROR,
            data=outcome.as_data(),
        )

    logger.info("Label %s removed from %d task(s)", label.id, outcome.changed)
    return ActionResult.ok(
        f'✅ Removed label "{label.name}" from {outcome.changed} task(s).',
        ActionTag.UPDATE,
        {"label_id": str(label.id), **outcome.as_data()},
    )
