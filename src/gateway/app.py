"""FastAPI application factory for the board chat API.

- Chat API: /api/v1/chat/*  (routers attached by the composition root)
- healthz:  liveness probe
- metrics:  Prometheus exposition of the default registry

Every response carries X-Trace-Id; an incoming header value is reused.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.shared.errors import (
    BoardError,
    ConflictError,
    NotFoundError,
    PortUnavailableError,
    ValidationError,
)
from src.shared.trace_context import TRACE_HEADER, trace_context

if TYPE_CHECKING:
    from contextlib import AbstractAsyncContextManager

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[BoardError], int], ...] = (
    (NotFoundError, 404),
    (ValidationError, 422),
    (ConflictError, 409),
    (PortUnavailableError, 503),
)


def _error_body(error: str, message: str) -> dict[str, str]:
    return {"error": error, "message": message}


def create_app(
    *,
    cors_origins: list[str] | None = None,
    lifespan: Callable[[FastAPI], AbstractAsyncContextManager[None]] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        cors_origins: Allowed CORS origins. Falls back to CORS_ORIGINS env var.
        lifespan: Async context manager factory for startup/shutdown lifecycle.

    Returns:
        Configured FastAPI application without feature routers.
    """
    origins = cors_origins or [
        o.strip() for o in os.environ.get("CORS_ORIGINS", "").split(",") if o.strip()
    ]

    app = FastAPI(
        title="Board Chat API",
        description="Natural-language commands for a kanban board",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["Content-Type", TRACE_HEADER],
            expose_headers=[TRACE_HEADER],
        )

    # -- Error handlers --

    @app.exception_handler(BoardError)
    async def _board_error(_: Request, exc: BoardError) -> JSONResponse:
        status_code = next(
            (status for error_type, status in _STATUS_BY_ERROR if isinstance(exc, error_type)),
            500,
        )
        if status_code >= 500:
            logger.warning("Board error surfaced to HTTP: %s (%s)", exc, exc.code)
        return JSONResponse(status_code=status_code, content=_error_body(exc.code, str(exc)))

    @app.exception_handler(RequestValidationError)
    async def _request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return JSONResponse(status_code=422, content=_error_body("VALIDATION", message))

    # Uniform {error, message} schema for Starlette's own HTTP errors
    @app.exception_handler(StarletteHTTPException)
    async def _http_exception(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        code_map = {
            404: "NOT_FOUND",
            405: "METHOD_NOT_ALLOWED",
        }
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(
                code_map.get(exc.status_code, "HTTP_ERROR"),
                exc.detail or f"HTTP {exc.status_code}",
            ),
        )

    # -- Trace middleware --

    @app.middleware("http")
    async def trace_middleware(request: Request, call_next: Any) -> Response:
        with trace_context(request.headers.get(TRACE_HEADER)) as trace_id:
            response = await call_next(request)
        response.headers[TRACE_HEADER] = trace_id
        return response

    # -- System routes --

    @app.get("/healthz", tags=["system"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics", tags=["system"], include_in_schema=False)
    async def metrics() -> Response:
        from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

        return Response(
            content=generate_latest(),
            media_type=CONTENT_TYPE_LATEST,
        )

    return app
