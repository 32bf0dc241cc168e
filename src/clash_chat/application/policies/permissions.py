from __future__ import annotations

from uuid import UUID

from clash_chat.application.exceptions import ForbiddenError
from clash_chat.application.repositories.relationship import RelationshipReader
from clash_chat.domain.entities.relationship import Relationship


async def assert_friends(
    user_id: UUID,
    other_id: UUID,
    relationships: RelationshipReader,
    *,
    detail: str = "Not friends with this user",
) -> Relationship:
    """Raise unless the two users share an accepted relationship."""
    relationship = await relationships.find_accepted(user_id, other_id)
    if relationship is None:
        raise ForbiddenError(detail)
    return relationship
