"""Chat session history owned by the HTTP layer.

The interpreter is stateless; the gateway keeps a short rolling history
per chat session so a client can redraw its transcript. Sessions live in
process memory and are lost on restart.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20


@dataclass(frozen=True)
class ChatMessage:
    """One transcript line: the user's command or the interpreter's reply."""

    role: str
    content: str
    timestamp: str
    data: dict[str, Any] | None = None


@dataclass
class ChatSession:
    session_id: str
    created_at: str
    history: deque[ChatMessage] = field(default_factory=deque)

    def append(self, role: str, content: str, data: dict[str, Any] | None = None) -> ChatMessage:
        message = ChatMessage(
            role=role,
            content=content,
            timestamp=datetime.now(UTC).isoformat(),
            data=data,
        )
        self.history.append(message)
        return message


class ChatSessionStore:
    """In-memory session registry with a bounded history per session.

    Args:
        history_limit: Messages kept per session; older ones drop off.
    """

    def __init__(self, *, history_limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if history_limit < 1:
            msg = f"history_limit must be positive, got {history_limit}"
            raise ValueError(msg)
        self._history_limit = history_limit
        self._sessions: dict[str, ChatSession] = {}

    @property
    def history_limit(self) -> int:
        return self._history_limit

    def get(self, session_id: str) -> ChatSession | None:
        return self._sessions.get(session_id)

    def get_or_create(self, session_id: str | None = None) -> ChatSession:
        """Return the named session, creating it (or a fresh id) when absent."""
        if session_id is not None and session_id in self._sessions:
            return self._sessions[session_id]
        session = ChatSession(
            session_id=session_id or uuid4().hex,
            created_at=datetime.now(UTC).isoformat(),
            history=deque(maxlen=self._history_limit),
        )
        self._sessions[session.session_id] = session
        logger.info("Opened chat session %s", session.session_id)
        return session

    def clear(self, session_id: str) -> bool:
        """Drop a session's history. Returns False if the session is unknown."""
        session = self._sessions.get(session_id)
        if session is None:
            return False
        session.history.clear()
        return True

    def __len__(self) -> int:
        return len(self._sessions)
