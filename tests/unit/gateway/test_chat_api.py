"""Tests for the chat REST API over a seeded in-memory board."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient

from src.gateway.api.chat import MAX_MESSAGE_LENGTH, create_chat_router
from src.gateway.app import create_app
from src.gateway.sessions import ChatSessionStore
from src.shared.errors import PortUnavailableError
from src.shared.trace_context import TRACE_HEADER

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from src.interpreter import CommandInterpreter
    from tests.conftest import Board


@pytest.fixture
def sessions() -> ChatSessionStore:
    return ChatSessionStore(history_limit=4)


@pytest.fixture
async def client(
    interpreter: CommandInterpreter,
    sessions: ChatSessionStore,
) -> AsyncIterator[AsyncClient]:
    app = create_app()
    app.include_router(create_chat_router(interpreter=interpreter, sessions=sessions))
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.unit
class TestSendCommand:
    async def test_search_returns_wire_form(self, client: AsyncClient) -> None:
        resp = await client.post("/api/v1/chat", json={"message": "Show all tasks"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["action"] == "search"
        assert body["data"]["count"] == 8
        assert "reason" not in body
        assert body["session_id"]

    async def test_failure_carries_reason(self, client: AsyncClient) -> None:
        resp = await client.post("/api/v1/chat", json={"message": "xyzzy"})

        body = resp.json()
        assert resp.status_code == 200
        assert body["success"] is False
        assert body["reason"] == "unclassified"

    async def test_confirm_flag_reaches_interpreter(
        self,
        board: Board,
        client: AsyncClient,
    ) -> None:
        message = "Delete all tasks in Done"
        gated = await client.post("/api/v1/chat", json={"message": message})
        assert gated.json()["reason"] == "ambiguous_bulk_destructive"

        confirmed = await client.post(
            "/api/v1/chat",
            json={"message": message, "confirm": True},
        )
        assert confirmed.json()["success"] is True
        assert len(await board.store.list_tasks()) == 5

    async def test_store_failure_logs_session_id(
        self,
        board: Board,
        client: AsyncClient,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        board.store.fail_on["list_tasks"] = PortUnavailableError("task_store")

        with caplog.at_level(logging.ERROR, logger="src.interpreter.dispatcher"):
            resp = await client.post(
                "/api/v1/chat",
                json={"message": "Show all tasks", "session_id": "s-42"},
            )

        assert resp.json()["reason"] == "store_failure"
        [record] = [r for r in caplog.records if r.getMessage() == "structured_error"]
        assert record.structured_error["session_id"] == "s-42"  # type: ignore[attr-defined]

    async def test_empty_message_rejected(self, client: AsyncClient) -> None:
        resp = await client.post("/api/v1/chat", json={"message": "   "})

        assert resp.status_code == 422
        assert resp.json()["error"] == "VALIDATION"
        assert "empty" in resp.json()["message"]

    async def test_overlong_message_rejected(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/v1/chat",
            json={"message": "x" * (MAX_MESSAGE_LENGTH + 1)},
        )
        assert resp.status_code == 422

    async def test_response_carries_trace_id(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/api/v1/chat",
            json={"message": "help"},
            headers={TRACE_HEADER: "t-1"},
        )
        assert resp.headers[TRACE_HEADER] == "t-1"


@pytest.mark.unit
class TestHistory:
    async def test_transcript_recorded_in_order(self, client: AsyncClient) -> None:
        first = await client.post("/api/v1/chat", json={"message": "help"})
        session_id = first.json()["session_id"]

        resp = await client.get(f"/api/v1/chat/{session_id}/history")

        assert resp.status_code == 200
        messages = resp.json()["messages"]
        assert [m["role"] for m in messages] == ["user", "assistant"]
        assert messages[0]["content"] == "help"

    async def test_history_is_bounded(
        self,
        client: AsyncClient,
        sessions: ChatSessionStore,
    ) -> None:
        first = await client.post("/api/v1/chat", json={"message": "help"})
        session_id = first.json()["session_id"]
        for _ in range(3):
            await client.post(
                "/api/v1/chat",
                json={"message": "Board summary", "session_id": session_id},
            )

        resp = await client.get(f"/api/v1/chat/{session_id}/history")

        assert len(resp.json()["messages"]) == sessions.history_limit

    async def test_unknown_session_404(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/chat/missing/history")

        assert resp.status_code == 404
        assert resp.json()["error"] == "NOT_FOUND"

    async def test_clear(self, client: AsyncClient) -> None:
        first = await client.post("/api/v1/chat", json={"message": "help"})
        session_id = first.json()["session_id"]

        resp = await client.post("/api/v1/chat/clear", json={"session_id": session_id})

        assert resp.json() == {"session_id": session_id, "cleared": True}
        history = await client.get(f"/api/v1/chat/{session_id}/history")
        assert history.json()["messages"] == []

    async def test_clear_unknown_session(self, client: AsyncClient) -> None:
        resp = await client.post("/api/v1/chat/clear", json={"session_id": "missing"})
        assert resp.status_code == 404
