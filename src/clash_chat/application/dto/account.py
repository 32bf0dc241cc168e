from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from clash_chat.domain.entities.account import Account
from clash_chat.domain.value_objects.enums import FriendshipStatus


@dataclass(frozen=True, slots=True)
class UserWithFriendship:
    account: Account
    friendship_status: FriendshipStatus
    friend_request_id: UUID | None = None
