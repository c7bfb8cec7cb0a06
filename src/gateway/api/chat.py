"""Chat REST API endpoints.

- POST /api/v1/chat -> CommandInterpreter -> ActionResult wire form
- GET /api/v1/chat/{session_id}/history -> rolling transcript
- POST /api/v1/chat/clear -> drop a session's transcript
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter
from pydantic import BaseModel, field_validator

from src.shared.errors import NotFoundError

if TYPE_CHECKING:
    from src.gateway.sessions import ChatSessionStore
    from src.interpreter import CommandInterpreter

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 2000


class ChatRequest(BaseModel):
    """Request model for one chat command."""

    message: str
    session_id: str | None = None
    confirm: bool = False

    @field_validator("message")
    @classmethod
    def message_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            msg = "Message cannot be empty"
            raise ValueError(msg)
        if len(v) > MAX_MESSAGE_LENGTH:
            msg = f"Message longer than {MAX_MESSAGE_LENGTH} characters"
            raise ValueError(msg)
        return v.strip()


class ChatResponse(BaseModel):
    """ActionResult wire form plus the session it was recorded in."""

    success: bool
    message: str
    action: str | None = None
    data: dict[str, Any] | None = None
    reason: str | None = None
    session_id: str


class ClearRequest(BaseModel):
    session_id: str


class MessageItem(BaseModel):
    """Single message in chat history."""

    role: str
    content: str
    timestamp: str
    data: dict[str, Any] | None = None


class HistoryResponse(BaseModel):
    session_id: str
    messages: list[MessageItem]


def create_chat_router(
    *,
    interpreter: CommandInterpreter,
    sessions: ChatSessionStore,
) -> APIRouter:
    """Create chat API router with injected interpreter and session store."""
    router = APIRouter(prefix="/api/v1/chat", tags=["chat"])

    @router.post("", response_model=ChatResponse, response_model_exclude_none=True)
    async def send_command(body: ChatRequest) -> ChatResponse:
        """Interpret one command and record both sides in the session."""
        session = sessions.get_or_create(body.session_id)
        session.append("user", body.message)

        result = await interpreter.process(
            body.message, confirm=body.confirm, session_id=session.session_id
        )
        payload = result.to_dict()
        session.append("assistant", result.message, payload.get("data"))

        logger.info(
            "Chat command session_id=%s action=%s success=%s",
            session.session_id,
            payload.get("action"),
            result.success,
        )
        return ChatResponse(**payload, session_id=session.session_id)

    @router.get("/{session_id}/history", response_model=HistoryResponse)
    async def get_history(session_id: str) -> HistoryResponse:
        """Return the rolling transcript, oldest first."""
        session = sessions.get(session_id)
        if session is None:
            raise NotFoundError("Chat session", session_id)
        return HistoryResponse(
            session_id=session_id,
            messages=[
                MessageItem(
                    role=m.role,
                    content=m.content,
                    timestamp=m.timestamp,
                    data=m.data,
                )
                for m in session.history
            ],
        )

    @router.post("/clear")
    async def clear_history(body: ClearRequest) -> dict[str, object]:
        if not sessions.clear(body.session_id):
            raise NotFoundError("Chat session", body.session_id)
        logger.info("Cleared chat session %s", body.session_id)
        return {"session_id": body.session_id, "cleared": True}

    return router
