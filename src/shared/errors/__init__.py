"""Unified error hierarchy for the board command interpreter.

All domain errors inherit from BoardError. Store adapters raise these
types; the interpreter converts them into failure results and the HTTP
layer maps them onto status codes.
"""

from __future__ import annotations


class BoardError(Exception):
    """Base error for all board interpreter exceptions."""

    def __init__(self, message: str, code: str = "BOARD_ERROR") -> None:
        self.code = code
        super().__init__(message)


# -- Port errors (raised by TaskStorePort implementations) --


class PortUnavailableError(BoardError):
    """The task store backend is temporarily unavailable."""

    def __init__(self, port_name: str, message: str = "") -> None:
        self.port_name = port_name
        super().__init__(
            message or f"Port {port_name} is unavailable",
            code="PORT_UNAVAILABLE",
        )


# -- Domain errors --


class NotFoundError(BoardError):
    """Requested board entity not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            code="NOT_FOUND",
        )


class ConflictError(BoardError):
    """Entity state conflict (duplicate label name, etc.)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="CONFLICT")


class ValidationError(BoardError):
    """Input validation failed."""

    def __init__(self, message: str, field: str = "") -> None:
        self.field = field
        super().__init__(message, code="VALIDATION")


__all__ = [
    "BoardError",
    "ConflictError",
    "NotFoundError",
    "PortUnavailableError",
    "ValidationError",
]
