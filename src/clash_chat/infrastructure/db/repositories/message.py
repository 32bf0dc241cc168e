from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clash_chat.domain.entities.message import Message
from clash_chat.domain.value_objects.enums import DeliveryStatus
from clash_chat.infrastructure.db.mappers import message as mapper
from clash_chat.infrastructure.db.models.message import MessageModel


def _conversation(a: UUID, b: UUID):
    return or_(
        and_(MessageModel.sender_id == a, MessageModel.receiver_id == b),
        and_(MessageModel.sender_id == b, MessageModel.receiver_id == a),
    )


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, message_id: UUID) -> Message | None:
        result = await self._session.get(MessageModel, message_id)
        return mapper.model_to_entity(result) if result else None

    async def list_between(
        self,
        a: UUID,
        b: UUID,
        *,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(_conversation(a, b))
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def last_between(self, a: UUID, b: UUID) -> Message | None:
        page = await self.list_between(a, b, limit=1)
        return page[0] if page else None

    async def count_unread(self, sender_id: UUID, receiver_id: UUID) -> int:
        stmt = select(func.count()).select_from(MessageModel).where(
            MessageModel.sender_id == sender_id,
            MessageModel.receiver_id == receiver_id,
            MessageModel.status != DeliveryStatus.READ,
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def advance_status(self, message_id: UUID, status: DeliveryStatus) -> bool:
        lower = [s.value for s in status.lower()]
        if not lower:
            return False
        stmt = (
            update(MessageModel)
            .where(MessageModel.id == message_id, MessageModel.status.in_(lower))
            .values(status=status.value)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def mark_read_from(self, sender_id: UUID, receiver_id: UUID) -> int:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.sender_id == sender_id,
                MessageModel.receiver_id == receiver_id,
                MessageModel.status != DeliveryStatus.READ,
            )
            .values(status=DeliveryStatus.READ.value)
        )
        result = await self._session.execute(stmt)
        return result.rowcount
