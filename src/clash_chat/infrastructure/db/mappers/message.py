from __future__ import annotations

from clash_chat.domain.entities.message import Message
from clash_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        sender_id=model.sender_id,
        receiver_id=model.receiver_id,
        content=model.content,
        message_type=model.message_type,
        status=model.status,
        created_at=model.created_at,
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        sender_id=entity.sender_id,
        receiver_id=entity.receiver_id,
        content=entity.content,
        message_type=entity.message_type,
        status=entity.status,
        created_at=entity.created_at,
    )
