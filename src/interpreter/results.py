"""Result contract returned by CommandInterpreter.process."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ActionTag(str, Enum):
    """Coarse operation kind the caller uses to refresh its views."""

    SEARCH = "search"
    CREATE = "create"
    MOVE = "move"
    UPDATE = "update"
    DELETE = "delete"
    INFO = "info"
    HELP = "help"
    UNKNOWN = "unknown"
    ERROR = "error"


class FailureReason(str, Enum):
    NO_TARGET = "no_target"
    MISSING_ARGUMENT = "missing_argument"
    AMBIGUOUS_BULK_DESTRUCTIVE = "ambiguous_bulk_destructive"
    NO_STRUCTURAL_TARGET = "no_structural_target"
    UNCLASSIFIED = "unclassified"
    STORE_FAILURE = "store_failure"


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one interpreted command.

    A failed result never follows a write made for the same command:
    handlers resolve and validate everything before their first write.
    """

    success: bool
    message: str
    action: ActionTag | None = None
    data: dict[str, Any] | None = None
    reason: FailureReason | None = None

    @classmethod
    def ok(
        cls,
        message: str,
        action: ActionTag,
        data: dict[str, Any] | None = None,
    ) -> ActionResult:
        return cls(success=True, message=message, action=action, data=data)

    @classmethod
    def fail(
        cls,
        message: str,
        reason: FailureReason,
        *,
        action: ActionTag | None = None,
        data: dict[str, Any] | None = None,
    ) -> ActionResult:
        return cls(success=False, message=message, action=action, data=data, reason=reason)

    def to_dict(self) -> dict[str, Any]:
        """Wire form: {success, message, action?, data?, reason?}."""
        payload: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.action is not None:
            payload["action"] = self.action.value
        if self.data is not None:
            payload["data"] = self.data
        if self.reason is not None:
            payload["reason"] = self.reason.value
        return payload
