"""Shared test fixtures."""
from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncIterator
from uuid import UUID

import jwt
import pytest

from clash_chat.application.dto.principal import Principal
from clash_chat.application.exceptions import ConflictError
from clash_chat.application.uow import UnitOfWorkFactory
from clash_chat.config import settings
from clash_chat.domain.entities.account import Account
from clash_chat.domain.entities.message import Message
from clash_chat.domain.entities.relationship import Relationship
from clash_chat.domain.value_objects.enums import (
    DeliveryStatus,
    MessageType,
    PresenceStatus,
    RelationshipStatus,
)

_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_account(
    username: str,
    *,
    account_id: UUID | None = None,
    status: str = PresenceStatus.OFFLINE,
    created_at: datetime | None = None,
) -> Account:
    return Account(
        id=account_id or uuid.uuid4(),
        username=username,
        email=f"{username}@example.com",
        avatar=None,
        status=status,
        last_seen=None,
        created_at=created_at or _EPOCH,
    )


def make_relationship(
    requester: Account,
    recipient: Account,
    *,
    status: str = RelationshipStatus.ACCEPTED,
    updated_at: datetime | None = None,
) -> Relationship:
    return Relationship(
        id=uuid.uuid4(),
        requester_id=requester.id,
        recipient_id=recipient.id,
        status=status,
        created_at=_EPOCH,
        updated_at=updated_at or _EPOCH,
    )


def make_message(
    sender: Account,
    receiver: Account,
    *,
    content: str = "hello",
    status: str = DeliveryStatus.SENT,
    created_at: datetime | None = None,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        sender_id=sender.id,
        receiver_id=receiver.id,
        content=content,
        message_type=MessageType.TEXT,
        status=status,
        created_at=created_at or datetime.now(timezone.utc),
    )


def make_token(user_id: UUID, *, claim: str = "sub", expires_in: int = 3600) -> str:
    payload = {
        claim: str(user_id),
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def principal_of(account: Account) -> Principal:
    return Principal(user_id=account.id, email=account.email)


# -- in-memory repositories -------------------------------------------------


@dataclass
class FakeAccountReader:
    _accounts: dict[UUID, Account] = field(default_factory=dict)

    async def get_by_id(self, account_id: UUID) -> Account | None:
        return self._accounts.get(account_id)

    async def get_many(self, account_ids: list[UUID]) -> dict[UUID, Account]:
        return {i: self._accounts[i] for i in account_ids if i in self._accounts}

    async def list_accounts(self, *, skip: int = 0, limit: int = 20) -> list[Account]:
        ordered = sorted(self._accounts.values(), key=lambda a: a.created_at, reverse=True)
        return ordered[skip : skip + limit]

    async def search(
        self, query: str, *, exclude_id: UUID | None = None, limit: int = 20
    ) -> list[Account]:
        needle = query.lower()
        return [
            a
            for a in self._accounts.values()
            if a.id != exclude_id and (needle in a.username.lower() or needle in a.email.lower())
        ][:limit]


@dataclass
class FakeAccountWriter:
    _reader: FakeAccountReader
    presence_calls: list[tuple[UUID, str, datetime | None]] = field(default_factory=list)

    async def set_presence(
        self,
        account_id: UUID,
        status: PresenceStatus,
        last_seen: datetime | None = None,
    ) -> None:
        self.presence_calls.append((account_id, status, last_seen))
        account = self._reader._accounts.get(account_id)
        if account is None:
            return
        changes: dict[str, Any] = {"status": status}
        if last_seen is not None:
            changes["last_seen"] = last_seen
        self._reader._accounts[account_id] = replace(account, **changes)


@dataclass
class FakeRelationshipReader:
    _relationships: dict[UUID, Relationship] = field(default_factory=dict)

    async def get_by_id(self, relationship_id: UUID) -> Relationship | None:
        return self._relationships.get(relationship_id)

    async def find_between(self, a: UUID, b: UUID) -> Relationship | None:
        for r in self._relationships.values():
            if {r.requester_id, r.recipient_id} == {a, b}:
                return r
        return None

    async def find_accepted(self, a: UUID, b: UUID) -> Relationship | None:
        r = await self.find_between(a, b)
        if r is not None and r.status == RelationshipStatus.ACCEPTED:
            return r
        return None

    async def list_accepted(self, user_id: UUID) -> list[Relationship]:
        accepted = [
            r
            for r in self._relationships.values()
            if r.involves(user_id) and r.status == RelationshipStatus.ACCEPTED
        ]
        return sorted(accepted, key=lambda r: r.updated_at, reverse=True)

    async def list_for_user(self, user_id: UUID) -> list[Relationship]:
        return [r for r in self._relationships.values() if r.involves(user_id)]

    async def list_pending_for_recipient(self, user_id: UUID) -> list[Relationship]:
        return [
            r
            for r in self._relationships.values()
            if r.recipient_id == user_id and r.status == RelationshipStatus.PENDING
        ]


@dataclass
class FakeRelationshipWriter:
    _reader: FakeRelationshipReader

    async def create(self, relationship: Relationship) -> Relationship:
        if await self._reader.find_between(relationship.requester_id, relationship.recipient_id):
            raise ConflictError("Relationship already exists")
        self._reader._relationships[relationship.id] = relationship
        return relationship

    async def set_status(self, relationship_id: UUID, status: RelationshipStatus) -> None:
        r = self._reader._relationships[relationship_id]
        self._reader._relationships[relationship_id] = replace(
            r, status=status, updated_at=datetime.now(timezone.utc),
        )

    async def delete(self, relationship_id: UUID) -> None:
        self._reader._relationships.pop(relationship_id, None)


@dataclass
class FakeMessageReader:
    _messages: dict[UUID, Message] = field(default_factory=dict)

    def _pair(self, a: UUID, b: UUID) -> list[Message]:
        pair = {a, b}
        found = [m for m in self._messages.values() if {m.sender_id, m.receiver_id} == pair]
        return sorted(found, key=lambda m: m.created_at, reverse=True)

    async def get_by_id(self, message_id: UUID) -> Message | None:
        return self._messages.get(message_id)

    async def list_between(
        self, a: UUID, b: UUID, *, skip: int = 0, limit: int = 50
    ) -> list[Message]:
        return self._pair(a, b)[skip : skip + limit]

    async def last_between(self, a: UUID, b: UUID) -> Message | None:
        messages = self._pair(a, b)
        return messages[0] if messages else None

    async def count_unread(self, sender_id: UUID, receiver_id: UUID) -> int:
        return sum(
            1
            for m in self._messages.values()
            if m.sender_id == sender_id
            and m.receiver_id == receiver_id
            and m.status != DeliveryStatus.READ
        )


@dataclass
class FakeMessageWriter:
    _reader: FakeMessageReader

    async def create(self, message: Message) -> Message:
        self._reader._messages[message.id] = message
        return message

    async def advance_status(self, message_id: UUID, status: DeliveryStatus) -> bool:
        m = self._reader._messages.get(message_id)
        if m is None or m.status not in status.lower():
            return False
        self._reader._messages[message_id] = replace(m, status=status)
        return True

    async def mark_read_from(self, sender_id: UUID, receiver_id: UUID) -> int:
        count = 0
        for m in list(self._reader._messages.values()):
            if (
                m.sender_id == sender_id
                and m.receiver_id == receiver_id
                and m.status != DeliveryStatus.READ
            ):
                self._reader._messages[m.id] = replace(m, status=DeliveryStatus.READ)
                count += 1
        return count


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    accounts: FakeAccountReader = field(default_factory=FakeAccountReader)
    accounts_w: FakeAccountWriter | None = None
    relationships: FakeRelationshipReader = field(default_factory=FakeRelationshipReader)
    relationships_w: FakeRelationshipWriter | None = None
    messages: FakeMessageReader = field(default_factory=FakeMessageReader)
    messages_w: FakeMessageWriter | None = None
    _committed: bool = False
    _rolled_back: bool = False

    def __post_init__(self) -> None:
        if self.accounts_w is None:
            self.accounts_w = FakeAccountWriter(self.accounts)
        if self.relationships_w is None:
            self.relationships_w = FakeRelationshipWriter(self.relationships)
        if self.messages_w is None:
            self.messages_w = FakeMessageWriter(self.messages)

    def add_accounts(self, *accounts: Account) -> None:
        for a in accounts:
            self.accounts._accounts[a.id] = a

    def add_relationships(self, *relationships: Relationship) -> None:
        for r in relationships:
            self.relationships._relationships[r.id] = r

    def add_messages(self, *messages: Message) -> None:
        for m in messages:
            self.messages._messages[m.id] = m

    def stored_messages(self) -> list[Message]:
        return list(self.messages._messages.values())

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self._committed = True

    async def rollback(self) -> None:
        self._rolled_back = True


def factory_for(uow: FakeUoW) -> UnitOfWorkFactory:
    """A unit of work factory that keeps handing out the same in-memory UoW."""

    @asynccontextmanager
    async def _open() -> AsyncIterator[FakeUoW]:
        try:
            yield uow
        except Exception:
            await uow.rollback()
            raise

    return _open


def broken_factory(exc: Exception | None = None) -> UnitOfWorkFactory:
    @asynccontextmanager
    async def _open() -> AsyncIterator[FakeUoW]:
        raise exc or RuntimeError("database unavailable")
        yield  # pragma: no cover

    return _open


# -- connections -------------------------------------------------------------


@dataclass
class FakeConnection:
    """Records every event pushed to it instead of writing to a socket."""
    connection_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    user_id: UUID | None = None
    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    async def emit(self, event_type: str, data: dict[str, Any]) -> None:
        self.events.append((str(event_type), data))

    def of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [data for name, data in self.events if name == event_type]

    def types(self) -> list[str]:
        return [name for name, _ in self.events]


@dataclass
class FixedClock:
    current: datetime = _EPOCH

    def now(self) -> datetime:
        return self.current


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()


@pytest.fixture
def alice() -> Account:
    return make_account("alice")


@pytest.fixture
def bob() -> Account:
    return make_account("bob")


@pytest.fixture
def carol() -> Account:
    return make_account("carol")
