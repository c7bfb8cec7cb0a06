"""Structured error records for failed commands.

A command that blows up inside the interpreter is logged once, as a
"structured_error" record. The record's `structured_error` attribute is
a JSON-ready dict naming the error code, the intent being handled and
the chat session and trace the command belonged to. Context values
under credential-like keys are masked before they reach the log.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import asdict, dataclass, field
from typing import Any

REDACTED = "[REDACTED]"

_SENSITIVE_KEYS = frozenset(
    {
        "password",
        "token",
        "secret",
        "api_key",
        "authorization",
        "cookie",
        "credential",
        "database_url",
    }
)


def _redact_sensitive(data: dict[str, Any]) -> dict[str, Any]:
    masked: dict[str, Any] = {}
    for key, value in data.items():
        if key.lower() in _SENSITIVE_KEYS:
            masked[key] = REDACTED
        elif isinstance(value, dict):
            masked[key] = _redact_sensitive(value)
        else:
            masked[key] = value
    return masked


@dataclass(frozen=True)
class StructuredError:
    """One failed command, as it is written to the log."""

    error_code: str
    message: str
    intent: str = ""
    session_id: str = ""
    trace_id: str = ""
    context: dict[str, Any] = field(default_factory=dict)
    stack_trace: str = ""

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        *,
        error_code: str = "",
        intent: str = "",
        session_id: str = "",
        trace_id: str = "",
        context: dict[str, Any] | None = None,
    ) -> StructuredError:
        """Build a record from `exc`.

        Without an explicit `error_code`, a BoardError's `.code` is used,
        else the exception's class name.
        """
        stack = traceback.format_exception(type(exc), exc, exc.__traceback__)
        return cls(
            error_code=error_code or getattr(exc, "code", type(exc).__name__),
            message=str(exc),
            intent=intent,
            session_id=session_id,
            trace_id=trace_id,
            context=dict(context or {}),
            stack_trace="".join(stack),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["context"] = _redact_sensitive(self.context)
        return data


def log_structured_error(
    logger: logging.Logger,
    exc: Exception,
    *,
    error_code: str = "",
    intent: str = "",
    session_id: str = "",
    trace_id: str = "",
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> StructuredError:
    """Log `exc` as a "structured_error" record and return the record."""
    structured = StructuredError.from_exception(
        exc,
        error_code=error_code,
        intent=intent,
        session_id=session_id,
        trace_id=trace_id,
        context=context,
    )
    logger.log(level, "structured_error", extra={"structured_error": structured.to_dict()})
    return structured
