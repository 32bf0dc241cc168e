from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from clash_chat.api.deps import build_verifier
from clash_chat.api.middleware.correlation_id import CorrelationIdMiddleware
from clash_chat.api.middleware.metrics import RequestTimingMiddleware
from clash_chat.api.v1.routers import friends, health, messages, users, ws
from clash_chat.application.exceptions import (
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from clash_chat.application.ports.auth import TokenVerifier
from clash_chat.application.ports.clock import Clock
from clash_chat.application.uow import UnitOfWorkFactory
from clash_chat.config import settings
from clash_chat.infrastructure.db.uow import open_uow
from clash_chat.infrastructure.ws.events import EventRouter
from clash_chat.infrastructure.ws.gateway import ConnectionGateway
from clash_chat.infrastructure.ws.registry import PresenceRegistry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("Chat service starting")
    yield
    logger.info("Chat service stopping (%d live connections)", len(app.state.registry))


def create_app(
    *,
    uow_factory: UnitOfWorkFactory | None = None,
    verifier: TokenVerifier | None = None,
    registry: PresenceRegistry | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    app = FastAPI(
        title="Clash Chat",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.uow_factory = uow_factory or open_uow
    app.state.verifier = verifier or build_verifier(settings)
    app.state.registry = registry if registry is not None else PresenceRegistry()
    app.state.gateway = ConnectionGateway(
        app.state.registry,
        app.state.verifier,
        app.state.uow_factory,
        clock,
    )
    app.state.events = EventRouter(
        app.state.registry,
        app.state.uow_factory,
        typing_requires_friendship=settings.TYPING_REQUIRES_FRIENDSHIP,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestTimingMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    _register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(friends.router)
    app.include_router(users.router)
    app.include_router(messages.router)
    app.include_router(ws.router)

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthenticationError)
    async def _unauthenticated(_req: Request, exc: AuthenticationError) -> JSONResponse:
        return JSONResponse(status_code=401, content={"detail": exc.detail})

    @app.exception_handler(NotFoundError)
    async def _not_found(_req: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(ForbiddenError)
    async def _forbidden(_req: Request, exc: ForbiddenError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": exc.detail})

    @app.exception_handler(ConflictError)
    async def _conflict(_req: Request, exc: ConflictError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": exc.detail})

    @app.exception_handler(ValidationError)
    async def _validation(_req: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": exc.detail})
