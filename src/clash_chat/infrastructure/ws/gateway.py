"""Connection lifecycle: authentication, presence bookkeeping, friend notifications."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from clash_chat.application.dto.principal import Principal
from clash_chat.application.exceptions import AuthenticationError
from clash_chat.application.ports.auth import TokenVerifier
from clash_chat.application.ports.clock import Clock, SystemClock
from clash_chat.application.ports.connection import Connection
from clash_chat.application.uow import UnitOfWorkFactory
from clash_chat.infrastructure.ws.protocol import ServerEvent
from clash_chat.infrastructure.ws.registry import PresenceRegistry
from clash_chat.services import presence_service

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PresenceSession:
    """State kept for one authenticated connection between connect and disconnect."""

    principal: Principal
    connection: Connection
    friend_ids: tuple[UUID, ...] = ()
    disconnected: bool = False

    @property
    def user_id(self) -> UUID:
        return self.principal.user_id


class ConnectionGateway:
    def __init__(
        self,
        registry: PresenceRegistry,
        verifier: TokenVerifier,
        uow_factory: UnitOfWorkFactory,
        clock: Clock | None = None,
    ) -> None:
        self._registry = registry
        self._verifier = verifier
        self._uow_factory = uow_factory
        self._clock = clock or SystemClock()

    async def authenticate(self, credential: str | None) -> Principal:
        """Verify the bearer credential offered by a new connection.

        Raises ``AuthenticationError``; the registry is never touched here.
        """
        if not credential:
            logger.info("WS authentication failed: no token provided")
            raise AuthenticationError("Authentication error: No token provided")
        try:
            return await self._verifier.verify(credential)
        except AuthenticationError as exc:
            logger.info("WS authentication failed: %s", exc.detail)
            raise AuthenticationError("Authentication error: Invalid token") from exc

    async def connect(self, connection: Connection, principal: Principal) -> PresenceSession:
        user_id = principal.user_id
        connection.user_id = user_id
        previous = self._registry.set(user_id, connection)

        try:
            async with self._uow_factory() as uow:
                friend_ids = await presence_service.go_online(user_id, uow)
        except Exception:
            # Hand presence back to the connection that was live before this attempt.
            if previous is not None and self._registry.get(user_id) is connection:
                self._registry.set(user_id, previous)
            else:
                self._registry.delete(user_id, connection)
            raise

        session = PresenceSession(principal, connection, tuple(friend_ids))
        logger.info(
            "User connected: %s (conn=%s, friends=%d)",
            user_id, connection.connection_id, len(friend_ids),
        )
        await self._notify_friends(session, ServerEvent.USER_ONLINE)
        return session

    async def disconnect(self, session: PresenceSession) -> None:
        """Tear down presence for a closed connection. Safe to call more than once."""
        if session.disconnected:
            return
        session.disconnected = True

        user_id = session.user_id
        if not self._registry.delete(user_id, session.connection):
            # A newer connection took over; the user is still online through it.
            logger.info(
                "Stale connection closed for %s (conn=%s)",
                user_id, session.connection.connection_id,
            )
            return

        logger.info("User disconnected: %s (conn=%s)", user_id, session.connection.connection_id)
        try:
            async with self._uow_factory() as uow:
                await presence_service.go_offline(user_id, self._clock.now(), uow)
        except Exception:
            logger.exception("Failed to persist offline status for %s", user_id)

        await self._notify_friends(session, ServerEvent.USER_OFFLINE)

    async def _notify_friends(self, session: PresenceSession, event: ServerEvent) -> None:
        data = {"userId": str(session.user_id)}
        for friend_id in session.friend_ids:
            friend_conn = self._registry.get(friend_id)
            if friend_conn is not None:
                await friend_conn.emit(event, data)
