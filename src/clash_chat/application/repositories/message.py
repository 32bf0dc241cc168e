from __future__ import annotations

from typing import Protocol
from uuid import UUID

from clash_chat.domain.entities.message import Message
from clash_chat.domain.value_objects.enums import DeliveryStatus


class MessageReader(Protocol):
    async def get_by_id(self, message_id: UUID) -> Message | None: ...

    async def list_between(
        self,
        a: UUID,
        b: UUID,
        *,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Message]:
        """Messages of the pair in either direction, newest first."""
        ...

    async def last_between(self, a: UUID, b: UUID) -> Message | None: ...

    async def count_unread(self, sender_id: UUID, receiver_id: UUID) -> int: ...


class MessageWriter(Protocol):
    async def create(self, message: Message) -> Message: ...

    async def advance_status(self, message_id: UUID, status: DeliveryStatus) -> bool:
        """Move the message forward to ``status``.

        Single conditional update: only rows currently in a lower status are
        touched, so the status never goes backwards. Returns True if a row changed.
        """
        ...

    async def mark_read_from(self, sender_id: UUID, receiver_id: UUID) -> int:
        """Mark every unread message of sender → receiver as read. Returns the count."""
        ...
