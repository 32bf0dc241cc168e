from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from clash_chat.domain.entities.account import Account
from clash_chat.domain.entities.message import Message
from clash_chat.domain.value_objects.enums import MessageType


@dataclass(frozen=True, slots=True)
class SendMessageDTO:
    receiver_id: UUID
    content: str
    message_type: MessageType = MessageType.TEXT


@dataclass(frozen=True, slots=True)
class AccountSummary:
    id: UUID
    username: str | None
    avatar: str | None

    @classmethod
    def of(cls, account_id: UUID, account: Account | None) -> AccountSummary:
        if account is None:
            return cls(id=account_id, username=None, avatar=None)
        return cls(id=account.id, username=account.username, avatar=account.avatar)


@dataclass(frozen=True, slots=True)
class MessageView:
    """A message with displayable sender/receiver details attached."""

    id: UUID
    sender: AccountSummary
    receiver: AccountSummary
    content: str
    message_type: str
    status: str
    created_at: datetime

    @classmethod
    def build(cls, message: Message, accounts: dict[UUID, Account]) -> MessageView:
        return cls(
            id=message.id,
            sender=AccountSummary.of(message.sender_id, accounts.get(message.sender_id)),
            receiver=AccountSummary.of(message.receiver_id, accounts.get(message.receiver_id)),
            content=message.content,
            message_type=message.message_type,
            status=message.status,
            created_at=message.created_at,
        )


@dataclass(frozen=True, slots=True)
class ChatSummary:
    friend: AccountSummary
    last_message: MessageView | None
    unread_count: int
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class HistoryPage:
    messages: list[MessageView]
    unread_count: int
