"""One WebSocket connection run as a small actor.

Frames read from the socket are parsed into ``WsInbound`` envelopes and put on
an inbox queue; a single dispatcher task drains it, so events from one client
are handled strictly in arrival order. Outbound events from any task go
through an outbox queue drained by a writer task, so socket writes never
interleave.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable
from uuid import UUID

import pydantic
from fastapi import WebSocket, WebSocketDisconnect

from clash_chat.infrastructure.ws.protocol import ServerEvent, WsInbound, WsOutbound

logger = logging.getLogger(__name__)

InboundHandler = Callable[[WsInbound], Awaitable[None]]
PeerGoneCallback = Callable[[], Awaitable[None]]


class WebSocketConnection:
    def __init__(
        self,
        websocket: WebSocket,
        *,
        outbox_size: int = 256,
        heartbeat_seconds: float | None = None,
    ) -> None:
        self.connection_id = uuid.uuid4().hex[:12]
        self.user_id: UUID | None = None
        self._ws = websocket
        self._heartbeat_seconds = heartbeat_seconds
        self._inbox: asyncio.Queue[WsInbound | None] = asyncio.Queue()
        self._outbox: asyncio.Queue[WsOutbound | None] = asyncio.Queue(maxsize=outbox_size)
        self._tasks: list[asyncio.Task[None]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def accept(self) -> None:
        await self._ws.accept()
        self._tasks.append(
            asyncio.create_task(self._write_loop(), name=f"ws-writer-{self.connection_id}")
        )
        if self._heartbeat_seconds:
            self._tasks.append(
                asyncio.create_task(self._heartbeat(), name=f"ws-heartbeat-{self.connection_id}")
            )

    async def emit(self, event_type: str, data: dict[str, Any]) -> None:
        if self._closed:
            return
        try:
            self._outbox.put_nowait(WsOutbound(type=event_type, data=data))
        except asyncio.QueueFull:
            logger.warning(
                "Outbox full for conn=%s (user=%s), dropping %s",
                self.connection_id, self.user_id, event_type,
            )

    async def serve(
        self,
        handler: InboundHandler,
        *,
        on_peer_gone: PeerGoneCallback | None = None,
    ) -> None:
        """Read until the peer goes away, then let queued events finish.

        ``on_peer_gone`` runs as soon as the read side ends and before the
        inbox is drained, so presence is torn down while late handlers still run.
        """
        dispatcher = asyncio.create_task(
            self._dispatch_loop(handler), name=f"ws-dispatch-{self.connection_id}",
        )
        try:
            await self._read_loop()
        finally:
            try:
                if on_peer_gone is not None:
                    await on_peer_gone()
            finally:
                await self._inbox.put(None)
                await dispatcher

    async def aclose(self) -> None:
        """Stop background tasks. Anything still in the outbox is dropped."""
        self._closed = True
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

    async def _read_loop(self) -> None:
        while True:
            try:
                raw = await self._ws.receive_text()
            except WebSocketDisconnect:
                return
            except Exception:
                # Binary frames and transport errors end the session like a disconnect.
                logger.warning("Read failed on conn=%s, closing", self.connection_id, exc_info=True)
                return
            try:
                event = WsInbound.model_validate_json(raw)
            except pydantic.ValidationError:
                await self.emit(ServerEvent.ERROR, {"message": "Invalid payload"})
                continue
            await self._inbox.put(event)

    async def _dispatch_loop(self, handler: InboundHandler) -> None:
        while True:
            event = await self._inbox.get()
            if event is None:
                return
            try:
                await handler(event)
            except Exception:
                logger.exception("Unhandled error for %s on conn=%s", event.type, self.connection_id)

    async def _write_loop(self) -> None:
        while True:
            out = await self._outbox.get()
            if out is None:
                return
            try:
                await self._ws.send_text(out.model_dump_json())
            except Exception:
                logger.debug("Send failed on conn=%s, stopping writer", self.connection_id, exc_info=True)
                self._closed = True
                return

    async def _heartbeat(self) -> None:
        while True:
            await asyncio.sleep(self._heartbeat_seconds)
            await self.emit(ServerEvent.PONG, {})
