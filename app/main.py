"""Application factory: routers, exception mapping and process-wide state."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings
from app.core.app_state import AppState
from app.exceptions import GatewayError
from app.infra.logging_config import LoggingConfig, get_logger
from app.routers import (
    contacts_router,
    conversations_router,
    media_router,
    messages_router,
    realtime,
    system,
    users_router,
    webhooks,
)

logger = get_logger("app")


def _method(request: Request) -> str:
    # WebSocket scopes carry no HTTP method.
    return request.scope.get("method", "WS")


def register_exception_handlers(app: FastAPI) -> None:
    """Map gateway errors to HTTP responses. Server-side detail is logged, never returned."""

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "%s on %s %s: %s",
                exc.__class__.__name__,
                _method(request),
                request.url.path,
                exc.message,
            )
            detail = exc.public_detail
        else:
            detail = exc.message
        return JSONResponse(status_code=exc.status_code, content={"detail": detail})

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(
        request: Request, exc: SQLAlchemyError
    ) -> JSONResponse:
        logger.error(
            "Database error on %s %s", _method(request), request.url.path, exc_info=exc
        )
        return JSONResponse(
            status_code=500, content={"detail": "Internal server error"}
        )


def create_app(testing: bool = False, state: AppState | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        testing: Leave logging to the test runner.
        state: Pre-built collaborators (tests inject fake carrier and storage).
    """
    settings = get_settings()
    if not testing:
        LoggingConfig(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.gateway.aclose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.gateway = state or AppState(settings)

    register_exception_handlers(app)

    app.include_router(system.router)
    app.include_router(users_router.router)
    app.include_router(contacts_router.router)
    app.include_router(conversations_router.router)
    app.include_router(messages_router.router)
    app.include_router(media_router.router)
    app.include_router(webhooks.router)
    app.include_router(realtime.router)

    return app


app = create_app()
