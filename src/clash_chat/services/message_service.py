from __future__ import annotations

import uuid
from dataclasses import replace

from clash_chat.application.dto.message import (
    AccountSummary,
    ChatSummary,
    HistoryPage,
    MessageView,
    SendMessageDTO,
)
from clash_chat.application.dto.principal import Principal
from clash_chat.application.policies.permissions import assert_friends
from clash_chat.application.ports.clock import utcnow
from clash_chat.application.uow import UnitOfWork
from clash_chat.domain.entities.message import Message
from clash_chat.domain.value_objects.enums import DeliveryStatus


async def send_message(
    principal: Principal,
    dto: SendMessageDTO,
    uow: UnitOfWork,
) -> Message:
    """Persist a new message in the ``sent`` state.

    Only allowed between users with an accepted relationship; raises
    ``ForbiddenError`` otherwise and nothing is written.
    """
    await assert_friends(principal.user_id, dto.receiver_id, uow.relationships)

    msg = Message(
        id=uuid.uuid4(),
        sender_id=principal.user_id,
        receiver_id=dto.receiver_id,
        content=dto.content,
        message_type=dto.message_type.value,
        status=DeliveryStatus.SENT,
        created_at=utcnow(),
    )
    msg = await uow.messages_w.create(msg)
    await uow.commit()
    return msg


async def mark_delivered(message: Message, uow: UnitOfWork) -> Message:
    changed = await uow.messages_w.advance_status(message.id, DeliveryStatus.DELIVERED)
    await uow.commit()
    if changed:
        return replace(message, status=DeliveryStatus.DELIVERED)
    # Someone already moved it further along (e.g. read); report what is stored.
    current = await uow.messages.get_by_id(message.id)
    return current or message


async def mark_read(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Message | None:
    """Mark a single message as read by its receiver.

    Returns None when the message does not exist or was not addressed to the
    caller; nothing is changed in that case.
    """
    message = await uow.messages.get_by_id(message_id)
    if message is None or message.receiver_id != principal.user_id:
        return None
    await uow.messages_w.advance_status(message_id, DeliveryStatus.READ)
    await uow.commit()
    return replace(message, status=DeliveryStatus.READ)


async def render(messages: list[Message], uow: UnitOfWork) -> list[MessageView]:
    """Attach sender/receiver display details to messages."""
    if not messages:
        return []
    ids = {m.sender_id for m in messages} | {m.receiver_id for m in messages}
    accounts = await uow.accounts.get_many(list(ids))
    return [MessageView.build(m, accounts) for m in messages]


async def get_history(
    principal: Principal,
    friend_id: uuid.UUID,
    skip: int,
    limit: int,
    uow: UnitOfWork,
) -> HistoryPage:
    """Return a page of the conversation with ``friend_id``, oldest first.

    Fetching history counts as reading it: every message from the friend that
    is not yet read is moved to ``read``.
    """
    await assert_friends(
        principal.user_id,
        friend_id,
        uow.relationships,
        detail="You can only view messages with friends",
    )
    messages = await uow.messages.list_between(
        principal.user_id, friend_id, skip=skip, limit=limit,
    )
    unread = await uow.messages_w.mark_read_from(friend_id, principal.user_id)
    await uow.commit()

    views = await render(list(reversed(messages)), uow)
    return HistoryPage(messages=views, unread_count=unread)


async def list_chats(
    principal: Principal,
    skip: int,
    limit: int,
    uow: UnitOfWork,
) -> tuple[list[ChatSummary], int]:
    """One summary per friend, most recent conversation first.

    Returns (page, total).
    """
    me = principal.user_id
    relationships = await uow.relationships.list_accepted(me)
    friend_ids = [r.counterpart(me) for r in relationships]
    accounts = await uow.accounts.get_many([me, *friend_ids])

    chats: list[ChatSummary] = []
    for relationship, friend_id in zip(relationships, friend_ids):
        last = await uow.messages.last_between(me, friend_id)
        unread = await uow.messages.count_unread(friend_id, me)
        chats.append(
            ChatSummary(
                friend=AccountSummary.of(friend_id, accounts.get(friend_id)),
                last_message=MessageView.build(last, accounts) if last else None,
                unread_count=unread,
                updated_at=relationship.updated_at,
            )
        )

    chats.sort(key=_chat_order)
    return chats[skip : skip + limit], len(chats)


def _chat_order(chat: ChatSummary) -> tuple[int, float]:
    # Chats with messages first (newest message first), then the rest by friendship age.
    if chat.last_message is not None:
        return 0, -chat.last_message.created_at.timestamp()
    return 1, -chat.updated_at.timestamp()
