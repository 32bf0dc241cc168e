from __future__ import annotations

from datetime import datetime
from uuid import UUID

from clash_chat.application.dto.account import UserWithFriendship
from clash_chat.infrastructure.ws.protocol import CamelModel


class AccountResponse(CamelModel):
    id: UUID
    username: str
    email: str
    avatar: str | None
    status: str
    last_seen: datetime | None


class UserWithFriendshipResponse(AccountResponse):
    friendship_status: str
    friend_request_id: UUID | None = None

    @classmethod
    def from_dto(cls, item: UserWithFriendship) -> UserWithFriendshipResponse:
        account = AccountResponse.model_validate(item.account)
        return cls(
            **account.model_dump(),
            friendship_status=item.friendship_status.value,
            friend_request_id=item.friend_request_id,
        )
