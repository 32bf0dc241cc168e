"""WebSocket wire format: envelopes, event names and payload models."""
from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from clash_chat.application.dto.message import MessageView
from clash_chat.domain.value_objects.enums import MessageType


class ClientEvent(StrEnum):
    SEND_MESSAGE = "send_message"
    TYPING = "typing"
    STOP_TYPING = "stop_typing"
    MESSAGE_READ = "message_read"
    PING = "ping"


class ServerEvent(StrEnum):
    USER_ONLINE = "user_online"
    USER_OFFLINE = "user_offline"
    RECEIVE_MESSAGE = "receive_message"
    MESSAGE_SENT = "message_sent"
    TYPING = "typing"
    STOP_TYPING = "stop_typing"
    MESSAGE_READ = "message_read"
    ERROR = "error"
    PONG = "pong"


class WsInbound(BaseModel):
    """Client → Server."""

    type: str
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str
    data: dict[str, Any] = {}


class CamelModel(BaseModel):
    """Fields are snake_case in Python and camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SendMessagePayload(CamelModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    receiver_id: UUID
    content: str = Field(min_length=1)
    message_type: MessageType = MessageType.TEXT


class TypingPayload(CamelModel):
    receiver_id: UUID


class MessageReadPayload(CamelModel):
    message_id: UUID


class AccountSummaryOut(CamelModel):
    id: UUID
    username: str | None
    avatar: str | None


class MessageOut(CamelModel):
    id: UUID
    sender: AccountSummaryOut
    receiver: AccountSummaryOut
    content: str
    message_type: str
    status: str
    created_at: datetime


def message_payload(view: MessageView) -> dict[str, Any]:
    return MessageOut.model_validate(view).model_dump(mode="json", by_alias=True)
