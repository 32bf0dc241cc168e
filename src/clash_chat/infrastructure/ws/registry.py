"""In-process presence registry: which connection currently speaks for a user."""
from __future__ import annotations

import logging
from uuid import UUID

from clash_chat.application.ports.connection import Connection

logger = logging.getLogger(__name__)


class PresenceRegistry:
    """Maps a user id to its single live connection.

    A newer connection for the same user replaces the older one, so only the
    most recent connection receives live events. Owned by one server instance;
    nothing here is persisted or shared between processes.
    """

    def __init__(self) -> None:
        self._connections: dict[UUID, Connection] = {}

    def set(self, user_id: UUID, connection: Connection) -> Connection | None:
        """Register ``connection`` for the user and return the handle it replaced."""
        previous = self._connections.get(user_id)
        self._connections[user_id] = connection
        if previous is not None and previous is not connection:
            logger.debug(
                "Presence for %s moved %s -> %s",
                user_id, previous.connection_id, connection.connection_id,
            )
        logger.debug("Presence set: %s (online=%d)", user_id, len(self._connections))
        return previous

    def get(self, user_id: UUID) -> Connection | None:
        return self._connections.get(user_id)

    def delete(self, user_id: UUID, connection: Connection) -> bool:
        """Remove the entry only if it still points at ``connection``.

        A stale disconnect must not evict a newer connection. Returns True when
        the entry was removed.
        """
        current = self._connections.get(user_id)
        if current is not connection:
            return False
        del self._connections[user_id]
        logger.debug("Presence removed: %s (online=%d)", user_id, len(self._connections))
        return True

    def is_online(self, user_id: UUID) -> bool:
        return user_id in self._connections

    def __len__(self) -> int:
        return len(self._connections)
