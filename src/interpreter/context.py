"""Per-command state handed to every handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from src.interpreter.normalize import normalize

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from src.interpreter.entities import Catalog, EntitySet
    from src.ports.task_store_port import TaskStorePort
    from src.shared.types import Task

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandContext:
    """Everything one command may read: the store, the snapshot, the message.

    Built fresh by the dispatcher for every call and never shared.
    """

    store: TaskStorePort
    catalog: Catalog
    entities: EntitySet
    message: str
    bulk: bool = False
    confirm: bool = False

    @property
    def normalized(self) -> str:
        return normalize(self.message)

    def mentions(self, *words: str) -> bool:
        """True if any of the words occurs in the normalized message."""
        normalized = self.normalized
        return any(word in normalized for word in words)


@dataclass(frozen=True)
class BatchOutcome:
    changed: int = 0
    failed: int = 0

    def as_data(self) -> dict[str, int]:
        data = {"task_count": self.changed}
        if self.failed:
            data["failed_count"] = self.failed
        return data


async def for_each_task(
    tasks: Iterable[Task],
    operation: Callable[[Task], Awaitable[bool]],
) -> BatchOutcome:
    """Apply a write to each task, best effort.

    `operation` returns True when it changed the task. A raising task is
    logged and counted as failed; the remaining tasks still run.
    """
    changed = failed = 0
    for task in tasks:
        try:
            if await operation(task):
                changed += 1
        except Exception:
            failed += 1
            logger.warning("Write failed for task %s", task.id, exc_info=True)
    return BatchOutcome(changed=changed, failed=failed)
