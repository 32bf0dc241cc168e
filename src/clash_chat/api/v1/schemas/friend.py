from __future__ import annotations

from datetime import datetime
from uuid import UUID

from clash_chat.domain.entities.account import Account
from clash_chat.domain.entities.relationship import Relationship
from clash_chat.infrastructure.ws.protocol import AccountSummaryOut, CamelModel


class FriendRequestCreate(CamelModel):
    recipient_id: UUID


class RelationshipResponse(CamelModel):
    id: UUID
    requester_id: UUID
    recipient_id: UUID
    status: str
    created_at: datetime
    updated_at: datetime


class IncomingRequestResponse(CamelModel):
    id: UUID
    requester: AccountSummaryOut
    created_at: datetime

    @classmethod
    def from_pair(cls, relationship: Relationship, requester: Account | None) -> IncomingRequestResponse:
        return cls(
            id=relationship.id,
            requester=AccountSummaryOut(
                id=relationship.requester_id,
                username=requester.username if requester else None,
                avatar=requester.avatar if requester else None,
            ),
            created_at=relationship.created_at,
        )
