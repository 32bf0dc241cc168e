"""Inbound real-time event handling for an authenticated connection."""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

import pydantic

from clash_chat.application.dto.message import SendMessageDTO
from clash_chat.application.exceptions import AppError, ForbiddenError
from clash_chat.application.uow import UnitOfWorkFactory
from clash_chat.infrastructure.ws.gateway import PresenceSession
from clash_chat.infrastructure.ws.protocol import (
    ClientEvent,
    MessageReadPayload,
    SendMessagePayload,
    ServerEvent,
    TypingPayload,
    WsInbound,
    message_payload,
)
from clash_chat.infrastructure.ws.registry import PresenceRegistry
from clash_chat.services import friend_service, message_service

logger = logging.getLogger(__name__)

Handler = Callable[[PresenceSession, dict[str, Any]], Awaitable[None]]


class EventRouter:
    """Dispatches client events; holds no per-connection state of its own.

    Every handler failure is answered with an ``error`` event to the caller
    only. Nothing raised here ever closes the connection.
    """

    def __init__(
        self,
        registry: PresenceRegistry,
        uow_factory: UnitOfWorkFactory,
        *,
        typing_requires_friendship: bool = False,
    ) -> None:
        self._registry = registry
        self._uow_factory = uow_factory
        self._typing_requires_friendship = typing_requires_friendship
        self._handlers: dict[str, Handler] = {
            ClientEvent.SEND_MESSAGE: self._on_send_message,
            ClientEvent.TYPING: self._on_typing,
            ClientEvent.STOP_TYPING: self._on_stop_typing,
            ClientEvent.MESSAGE_READ: self._on_message_read,
            ClientEvent.PING: self._on_ping,
        }

    async def dispatch(self, session: PresenceSession, event: WsInbound) -> None:
        handler = self._handlers.get(event.type)
        if handler is None:
            await _error(session, f"Unknown event: {event.type}")
            return

        try:
            await handler(session, event.data)
        except pydantic.ValidationError as exc:
            await _error(session, _describe(exc))
        except AppError as exc:
            await _error(session, exc.detail)
        except Exception:
            logger.exception("WS %s handler failed for %s", event.type, session.user_id)
            await _error(session, _FAILURES.get(event.type, "Request failed"))

    async def _on_send_message(self, session: PresenceSession, data: dict[str, Any]) -> None:
        payload = SendMessagePayload.model_validate(data)
        dto = SendMessageDTO(
            receiver_id=payload.receiver_id,
            content=payload.content,
            message_type=payload.message_type,
        )

        async with self._uow_factory() as uow:
            msg = await message_service.send_message(session.principal, dto, uow)

            receiver_conn = self._registry.get(dto.receiver_id)
            if receiver_conn is not None:
                msg = await message_service.mark_delivered(msg, uow)

            [view] = await message_service.render([msg], uow)

        data_out = message_payload(view)
        if receiver_conn is not None:
            await receiver_conn.emit(ServerEvent.RECEIVE_MESSAGE, data_out)
        await session.connection.emit(ServerEvent.MESSAGE_SENT, data_out)

    async def _on_typing(self, session: PresenceSession, data: dict[str, Any]) -> None:
        await self._relay_typing(session, data, ServerEvent.TYPING)

    async def _on_stop_typing(self, session: PresenceSession, data: dict[str, Any]) -> None:
        await self._relay_typing(session, data, ServerEvent.STOP_TYPING)

    async def _relay_typing(
        self,
        session: PresenceSession,
        data: dict[str, Any],
        event: ServerEvent,
    ) -> None:
        payload = TypingPayload.model_validate(data)
        receiver_conn = self._registry.get(payload.receiver_id)
        if receiver_conn is None:
            return

        # Off by default: typing indicators historically skip the friendship check.
        if self._typing_requires_friendship:
            async with self._uow_factory() as uow:
                if not await friend_service.are_friends(session.user_id, payload.receiver_id, uow):
                    raise ForbiddenError("Not friends with this user")

        await receiver_conn.emit(event, {"userId": str(session.user_id)})

    async def _on_message_read(self, session: PresenceSession, data: dict[str, Any]) -> None:
        payload = MessageReadPayload.model_validate(data)

        async with self._uow_factory() as uow:
            msg = await message_service.mark_read(payload.message_id, session.principal, uow)

        if msg is None:
            logger.debug("Ignoring read receipt for %s from %s", payload.message_id, session.user_id)
            return

        sender_conn = self._registry.get(msg.sender_id)
        if sender_conn is not None:
            await sender_conn.emit(ServerEvent.MESSAGE_READ, {"messageId": str(msg.id)})

    async def _on_ping(self, session: PresenceSession, data: dict[str, Any]) -> None:
        await session.connection.emit(ServerEvent.PONG, {})


_FAILURES: dict[str, str] = {
    ClientEvent.SEND_MESSAGE: "Failed to send message",
    ClientEvent.MESSAGE_READ: "Failed to mark message as read",
}


async def _error(session: PresenceSession, message: str) -> None:
    await session.connection.emit(ServerEvent.ERROR, {"message": message})


def _describe(exc: pydantic.ValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(p) for p in first.get("loc", ())) or "payload"
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"
