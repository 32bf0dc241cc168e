from __future__ import annotations

from uuid import UUID

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from clash_chat.application.exceptions import ConflictError
from clash_chat.domain.entities.relationship import Relationship
from clash_chat.domain.value_objects.enums import RelationshipStatus
from clash_chat.infrastructure.db.mappers import relationship as mapper
from clash_chat.infrastructure.db.models.relationship import RelationshipModel


def _pair(a: UUID, b: UUID):
    return or_(
        and_(RelationshipModel.requester_id == a, RelationshipModel.recipient_id == b),
        and_(RelationshipModel.requester_id == b, RelationshipModel.recipient_id == a),
    )


def _either_side(user_id: UUID):
    return or_(
        RelationshipModel.requester_id == user_id,
        RelationshipModel.recipient_id == user_id,
    )


class RelationshipReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, relationship_id: UUID) -> Relationship | None:
        result = await self._session.get(RelationshipModel, relationship_id)
        return mapper.model_to_entity(result) if result else None

    async def find_between(self, a: UUID, b: UUID) -> Relationship | None:
        stmt = select(RelationshipModel).where(_pair(a, b)).limit(1)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def find_accepted(self, a: UUID, b: UUID) -> Relationship | None:
        stmt = (
            select(RelationshipModel)
            .where(_pair(a, b), RelationshipModel.status == RelationshipStatus.ACCEPTED)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_accepted(self, user_id: UUID) -> list[Relationship]:
        stmt = (
            select(RelationshipModel)
            .where(_either_side(user_id), RelationshipModel.status == RelationshipStatus.ACCEPTED)
            .order_by(RelationshipModel.updated_at.desc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_for_user(self, user_id: UUID) -> list[Relationship]:
        stmt = select(RelationshipModel).where(_either_side(user_id))
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def list_pending_for_recipient(self, user_id: UUID) -> list[Relationship]:
        stmt = (
            select(RelationshipModel)
            .where(
                RelationshipModel.recipient_id == user_id,
                RelationshipModel.status == RelationshipStatus.PENDING,
            )
            .order_by(RelationshipModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class RelationshipWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, relationship: Relationship) -> Relationship:
        model = mapper.entity_to_model(relationship)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            # uq_relationship_pair: the pair already has a record in some direction
            await self._session.rollback()
            raise ConflictError("A relationship with this user already exists") from exc
        return mapper.model_to_entity(model)

    async def set_status(self, relationship_id: UUID, status: RelationshipStatus) -> None:
        stmt = (
            update(RelationshipModel)
            .where(RelationshipModel.id == relationship_id)
            .values(status=status.value)
        )
        await self._session.execute(stmt)

    async def delete(self, relationship_id: UUID) -> None:
        stmt = delete(RelationshipModel).where(RelationshipModel.id == relationship_id)
        await self._session.execute(stmt)
