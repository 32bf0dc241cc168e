from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID


class Connection(Protocol):
    """A live, authenticated client channel that outbound events can be pushed to."""

    connection_id: str
    user_id: UUID | None

    async def emit(self, event_type: str, data: dict[str, Any]) -> None: ...
