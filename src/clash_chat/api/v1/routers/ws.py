from __future__ import annotations

import logging
from functools import partial

from fastapi import APIRouter, Query, WebSocket, status

from clash_chat.api.middleware.correlation_id import correlation_id_ctx
from clash_chat.application.exceptions import AuthenticationError
from clash_chat.config import settings
from clash_chat.infrastructure.ws.connection import WebSocketConnection
from clash_chat.infrastructure.ws.events import EventRouter
from clash_chat.infrastructure.ws.gateway import ConnectionGateway

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

WS_AUTH_FAILED = 4001


def _credential(websocket: WebSocket, token: str | None) -> str | None:
    if token:
        return token
    header = websocket.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value:
        return value.strip()
    return None


@router.websocket("/ws")
async def ws_endpoint(
    websocket: WebSocket,
    token: str | None = Query(None),
) -> None:
    gateway: ConnectionGateway = websocket.app.state.gateway
    events: EventRouter = websocket.app.state.events

    try:
        principal = await gateway.authenticate(_credential(websocket, token))
    except AuthenticationError as exc:
        await websocket.close(code=WS_AUTH_FAILED, reason=exc.detail)
        return

    connection = WebSocketConnection(
        websocket,
        outbox_size=settings.WS_OUTBOX_SIZE,
        heartbeat_seconds=settings.WS_HEARTBEAT_SECONDS or None,
    )
    cid_token = correlation_id_ctx.set(connection.connection_id)
    try:
        await connection.accept()
        try:
            session = await gateway.connect(connection, principal)
        except Exception:
            logger.exception("WS connect failed for %s", principal.user_id)
            await connection.aclose()
            await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
            return

        try:
            await connection.serve(
                partial(events.dispatch, session),
                on_peer_gone=partial(gateway.disconnect, session),
            )
        finally:
            await gateway.disconnect(session)
            await connection.aclose()
    finally:
        correlation_id_ctx.reset(cid_token)
