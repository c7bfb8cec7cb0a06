"""CommandInterpreter: one free-text command in, one ActionResult out.

Pipeline per call:
    load catalog -> extract entities -> classify intent -> handler

Nothing survives between calls except the injected store and metrics.
Store failures never escape process(); they become an error result.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.interpreter.context import CommandContext
from src.interpreter.entities import extract_entities, load_catalog
from src.interpreter.formatting import UNKNOWN_TEXT
from src.interpreter.handlers.labels import handle_add_tag, handle_remove_tag
from src.interpreter.handlers.read import handle_help, handle_info, handle_search
from src.interpreter.handlers.tasks import (
    handle_create,
    handle_delete,
    handle_move,
    handle_set_priority,
)
from src.interpreter.handlers.titles import (
    handle_append_title,
    handle_prepend_title,
    handle_rename_title,
)
from src.interpreter.intent.classifier import Intent, IntentClassifier
from src.interpreter.metrics import OUTCOME_ERROR, OUTCOME_FAILURE, OUTCOME_SUCCESS
from src.interpreter.results import ActionResult, ActionTag, FailureReason
from src.interpreter.scope import is_bulk
from src.shared.logging.error_handler import log_structured_error
from src.shared.trace_context import get_trace_id

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from src.interpreter.metrics import InterpreterSLI
    from src.ports.task_store_port import TaskStorePort

    Handler = Callable[[CommandContext], Awaitable[ActionResult]]

logger = logging.getLogger(__name__)


async def handle_update(ctx: CommandContext) -> ActionResult:
    """Generic "update/change": priority if one is named, else a label."""
    if ctx.entities.priority is not None:
        return await handle_set_priority(ctx)
    if ctx.entities.labels:
        return await handle_add_tag(ctx)
    return ActionResult.fail(
        "What would you like to update? You can change priority, add labels, or move tasks.",
        FailureReason.MISSING_ARGUMENT,
    )


async def handle_unknown(ctx: CommandContext) -> ActionResult:
    """Guess from the entities when no rule matched."""
    lowered = ctx.message.lower()
    if ctx.entities.labels and ("add" in lowered or "tag" in lowered):
        return await handle_add_tag(ctx)
    if ctx.entities.tasks or ctx.entities.columns:
        return await handle_search(ctx)
    return ActionResult.fail(UNKNOWN_TEXT, FailureReason.UNCLASSIFIED, action=ActionTag.UNKNOWN)


HANDLERS: dict[Intent, Handler] = {
    Intent.HELP: handle_help,
    Intent.INFO: handle_info,
    Intent.SEARCH: handle_search,
    Intent.CREATE: handle_create,
    Intent.MOVE: handle_move,
    Intent.MARK_DONE: handle_move,
    Intent.DELETE: handle_delete,
    Intent.ADD_TAG: handle_add_tag,
    Intent.REMOVE_TAG: handle_remove_tag,
    Intent.UPDATE: handle_update,
    Intent.RENAME_TITLE: handle_rename_title,
    Intent.PREPEND_TITLE: handle_prepend_title,
    Intent.APPEND_TITLE: handle_append_title,
    Intent.UNKNOWN: handle_unknown,
}


class CommandInterpreter:
    """Rule-based interpreter for board commands.

    Args:
        store: Board persistence; every call reads a fresh catalog from it.
        sli: Optional metrics; commands are counted by intent and outcome.
        classifier: Intent rule cascade, replaceable for tests.
    """

    def __init__(
        self,
        store: TaskStorePort,
        *,
        sli: InterpreterSLI | None = None,
        classifier: IntentClassifier | None = None,
    ) -> None:
        self._store = store
        self._sli = sli
        self._classifier = classifier or IntentClassifier()

    async def process(
        self,
        message: str,
        *,
        confirm: bool = False,
        session_id: str = "",
    ) -> ActionResult:
        """Interpret one message.

        Args:
            message: Free-text command.
            confirm: Allow a delete that resolves to more than one task.
            session_id: Chat session the message came from, for error logs.
        """
        if self._sli is None:
            return await self._process(message, confirm=confirm, session_id=session_id)
        with self._sli.timer():
            return await self._process(message, confirm=confirm, session_id=session_id)

    async def _process(self, message: str, *, confirm: bool, session_id: str) -> ActionResult:
        intent = Intent.UNKNOWN
        try:
            catalog = await load_catalog(self._store)
            entities = extract_entities(message, catalog)
            classified = self._classifier.classify_detailed(message)
            intent = classified.intent
            logger.debug(
                "Intent %s (rule %s, cue %r), entities %s",
                intent.value,
                classified.rule_index,
                classified.matched_cue,
                entities.counts(),
            )

            ctx = CommandContext(
                store=self._store,
                catalog=catalog,
                entities=entities,
                message=message,
                bulk=is_bulk(message),
                confirm=confirm,
            )
            result = await HANDLERS[intent](ctx)
        except Exception as exc:
            log_structured_error(
                logger,
                exc,
                error_code="INTERPRETER_FAILURE",
                intent=intent.value,
                session_id=session_id,
                trace_id=get_trace_id(),
                context={"message_length": len(message)},
            )
            self._record(intent, OUTCOME_ERROR)
            return ActionResult.fail(
                f"Sorry, something went wrong: {exc}",
                FailureReason.STORE_FAILURE,
                action=ActionTag.ERROR,
            )

        self._record(intent, OUTCOME_SUCCESS if result.success else OUTCOME_FAILURE)
        if not result.success:
            logger.info(
                "Command not executed: intent=%s reason=%s",
                intent.value,
                result.reason.value if result.reason else None,
            )
        return result

    def _record(self, intent: Intent, outcome: str) -> None:
        if self._sli is not None:
            self._sli.record(intent.value, outcome)
