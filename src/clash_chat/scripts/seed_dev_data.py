"""Seed development data: creates the schema, a few accounts and a friendship.

Prints a bearer token per account so the WebSocket endpoint can be tried
right away (HS256 mode only).
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

import jwt

from clash_chat.config import settings
from clash_chat.domain.entities.message import Message
from clash_chat.domain.entities.relationship import Relationship
from clash_chat.domain.value_objects.enums import DeliveryStatus, MessageType, RelationshipStatus
from clash_chat.infrastructure.db.base import Base
from clash_chat.infrastructure.db.models import AccountModel
from clash_chat.infrastructure.db.session import AsyncSessionLocal, engine
from clash_chat.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)

DEV_USERS = ("alice", "bob", "carol")


def sample_accounts(now: datetime) -> list[AccountModel]:
    return [
        AccountModel(
            id=uuid.uuid4(),
            username=name,
            email=f"{name}@example.com",
            status="offline",
            created_at=now,
        )
        for name in DEV_USERS
    ]


def dev_token(account_id: uuid.UUID, secret: str, *, ttl: timedelta = timedelta(days=7)) -> str:
    payload = {"sub": str(account_id), "exp": datetime.now(timezone.utc) + ttl}
    return jwt.encode(payload, secret, algorithm=settings.JWT_ALGORITHM)


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        now = datetime.now(timezone.utc)

        alice, bob, carol = accounts = sample_accounts(now)
        session.add_all(accounts)
        await uow.flush()

        await uow.relationships_w.create(
            Relationship(
                id=uuid.uuid4(),
                requester_id=alice.id,
                recipient_id=bob.id,
                status=RelationshipStatus.ACCEPTED,
                created_at=now,
                updated_at=now,
            )
        )
        await uow.relationships_w.create(
            Relationship(
                id=uuid.uuid4(),
                requester_id=carol.id,
                recipient_id=alice.id,
                status=RelationshipStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
        )
        await uow.messages_w.create(
            Message(
                id=uuid.uuid4(),
                sender_id=bob.id,
                receiver_id=alice.id,
                content="Hey Alice!",
                message_type=MessageType.TEXT,
                status=DeliveryStatus.SENT,
                created_at=now,
            )
        )
        await uow.commit()
        logger.info("Seeded %d accounts", len(accounts))

    if settings.JWT_VERIFY_MODE == "hs256":
        for account in accounts:
            logger.info("%s: %s", account.username, dev_token(account.id, settings.JWT_SECRET))


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
