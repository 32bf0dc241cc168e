from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from clash_chat.domain.entities.account import Account
from clash_chat.domain.value_objects.enums import PresenceStatus
from clash_chat.infrastructure.db.mappers import account as mapper
from clash_chat.infrastructure.db.models.account import AccountModel


def _like_pattern(query: str) -> str:
    """Substring pattern for ILIKE with the wildcard characters taken literally."""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class AccountReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: UUID) -> Account | None:
        result = await self._session.get(AccountModel, account_id)
        return mapper.model_to_entity(result) if result else None

    async def get_many(self, account_ids: list[UUID]) -> dict[UUID, Account]:
        if not account_ids:
            return {}
        stmt = select(AccountModel).where(AccountModel.id.in_(set(account_ids)))
        result = await self._session.execute(stmt)
        return {m.id: mapper.model_to_entity(m) for m in result.scalars().all()}

    async def list_accounts(self, *, skip: int = 0, limit: int = 20) -> list[Account]:
        stmt = (
            select(AccountModel)
            .order_by(AccountModel.created_at.desc(), AccountModel.id)
            .offset(skip)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def search(
        self,
        query: str,
        *,
        exclude_id: UUID | None = None,
        limit: int = 20,
    ) -> list[Account]:
        pattern = _like_pattern(query)
        stmt = (
            select(AccountModel)
            .where(
                or_(
                    AccountModel.username.ilike(pattern, escape="\\"),
                    AccountModel.email.ilike(pattern, escape="\\"),
                )
            )
            .order_by(AccountModel.username)
            .limit(limit)
        )
        if exclude_id is not None:
            stmt = stmt.where(AccountModel.id != exclude_id)
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]


class AccountWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def set_presence(
        self,
        account_id: UUID,
        status: PresenceStatus,
        last_seen: datetime | None = None,
    ) -> None:
        values: dict[str, object] = {"status": status.value}
        if last_seen is not None:
            values["last_seen"] = last_seen
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(**values)
        )
        await self._session.execute(stmt)
