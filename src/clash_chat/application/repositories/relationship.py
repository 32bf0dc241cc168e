from __future__ import annotations

from typing import Protocol
from uuid import UUID

from clash_chat.domain.entities.relationship import Relationship
from clash_chat.domain.value_objects.enums import RelationshipStatus


class RelationshipReader(Protocol):
    async def get_by_id(self, relationship_id: UUID) -> Relationship | None: ...

    async def find_between(self, a: UUID, b: UUID) -> Relationship | None:
        """The single relationship of the unordered pair, whatever its status."""
        ...

    async def find_accepted(self, a: UUID, b: UUID) -> Relationship | None: ...

    async def list_accepted(self, user_id: UUID) -> list[Relationship]:
        """Accepted relationships on either side, most recently updated first."""
        ...

    async def list_for_user(self, user_id: UUID) -> list[Relationship]: ...

    async def list_pending_for_recipient(self, user_id: UUID) -> list[Relationship]: ...


class RelationshipWriter(Protocol):
    async def create(self, relationship: Relationship) -> Relationship:
        """Insert a relationship. Raise ``ConflictError`` if the pair already has one."""
        ...

    async def set_status(self, relationship_id: UUID, status: RelationshipStatus) -> None: ...

    async def delete(self, relationship_id: UUID) -> None: ...
