from __future__ import annotations

from datetime import datetime
from uuid import UUID

from clash_chat.application.dto.message import ChatSummary
from clash_chat.infrastructure.ws.protocol import (
    AccountSummaryOut,
    CamelModel,
    MessageOut,
    SendMessagePayload,
)

# The REST send path accepts the same body as the ``send_message`` event.
SendMessageRequest = SendMessagePayload
MessageResponse = MessageOut


class HistoryResponse(CamelModel):
    messages: list[MessageResponse]
    unread_count: int


class ChatResponse(CamelModel):
    friend_id: UUID
    friend: AccountSummaryOut
    last_message: MessageResponse | None
    unread_count: int
    updated_at: datetime

    @classmethod
    def from_summary(cls, chat: ChatSummary) -> ChatResponse:
        return cls(
            friend_id=chat.friend.id,
            friend=AccountSummaryOut.model_validate(chat.friend),
            last_message=MessageResponse.model_validate(chat.last_message) if chat.last_message else None,
            unread_count=chat.unread_count,
            updated_at=chat.updated_at,
        )


class ChatListResponse(CamelModel):
    chats: list[ChatResponse]
    total: int
    has_more: bool
