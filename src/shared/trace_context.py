"""Trace-id propagation for interpreter requests.

The HTTP layer opens a trace scope per chat request; the dispatcher reads
the current id when it logs decisions or structured errors, so one
command can be followed across log lines. Backed by contextvars, so
concurrent requests on one event loop never see each other's id.
"""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003 -- used at runtime by contextmanager
from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4

TRACE_HEADER = "X-Trace-Id"

_current_trace_id: ContextVar[str] = ContextVar("board_trace_id", default="")


def get_trace_id() -> str:
    """Return the active trace id, or "" outside any trace scope."""
    return _current_trace_id.get()


def new_trace_id() -> str:
    return uuid4().hex


@contextmanager
def trace_context(trace_id: str | None = None) -> Generator[str, None, None]:
    """Bind a trace id for the duration of the block.

    A caller-supplied id (e.g. from an incoming X-Trace-Id header) is
    reused; otherwise a fresh hex id is minted. The previous binding is
    restored on exit, including when the block raises.
    """
    effective_id = trace_id or new_trace_id()
    token = _current_trace_id.set(effective_id)
    try:
        yield effective_id
    finally:
        _current_trace_id.reset(token)
