from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from clash_chat.domain.entities.account import Account
from clash_chat.domain.value_objects.enums import PresenceStatus


class AccountReader(Protocol):
    async def get_by_id(self, account_id: UUID) -> Account | None: ...

    async def get_many(self, account_ids: list[UUID]) -> dict[UUID, Account]:
        """Fetch several accounts at once, keyed by id. Missing ids are skipped."""
        ...

    async def list_accounts(self, *, skip: int = 0, limit: int = 20) -> list[Account]:
        """Newest accounts first."""
        ...

    async def search(
        self, query: str, *, exclude_id: UUID | None = None, limit: int = 20
    ) -> list[Account]:
        """Case-insensitive substring match on username or email."""
        ...


class AccountWriter(Protocol):
    async def set_presence(
        self,
        account_id: UUID,
        status: PresenceStatus,
        last_seen: datetime | None = None,
    ) -> None:
        """Persist presence status; ``last_seen`` is only written when given."""
        ...
