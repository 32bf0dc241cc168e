from __future__ import annotations

import uuid

from clash_chat.application.dto.account import UserWithFriendship
from clash_chat.application.dto.principal import Principal
from clash_chat.application.exceptions import ConflictError, NotFoundError, ValidationError
from clash_chat.application.ports.clock import utcnow
from clash_chat.application.uow import UnitOfWork
from clash_chat.domain.entities.account import Account
from clash_chat.domain.entities.relationship import Relationship
from clash_chat.domain.value_objects.enums import FriendshipStatus, RelationshipStatus


async def are_friends(a: uuid.UUID, b: uuid.UUID, uow: UnitOfWork) -> bool:
    return await uow.relationships.find_accepted(a, b) is not None


async def list_friends(principal: Principal, uow: UnitOfWork) -> list[Account]:
    me = principal.user_id
    relationships = await uow.relationships.list_accepted(me)
    friend_ids = [r.counterpart(me) for r in relationships]
    accounts = await uow.accounts.get_many(friend_ids)
    return [accounts[fid] for fid in friend_ids if fid in accounts]


async def list_incoming_requests(
    principal: Principal,
    uow: UnitOfWork,
) -> list[tuple[Relationship, Account | None]]:
    pending = await uow.relationships.list_pending_for_recipient(principal.user_id)
    accounts = await uow.accounts.get_many([r.requester_id for r in pending])
    return [(r, accounts.get(r.requester_id)) for r in pending]


async def send_request(
    principal: Principal,
    recipient_id: uuid.UUID,
    uow: UnitOfWork,
) -> Relationship:
    if recipient_id == principal.user_id:
        raise ValidationError("Cannot send friend request to yourself")

    if await uow.accounts.get_by_id(recipient_id) is None:
        raise NotFoundError("Recipient does not exist")

    existing = await uow.relationships.find_between(principal.user_id, recipient_id)
    if existing is not None:
        if existing.status == RelationshipStatus.ACCEPTED:
            raise ConflictError("You are already friends with this user")
        if existing.status == RelationshipStatus.PENDING:
            raise ConflictError("Friend request already sent")
        raise ConflictError("Friend request was rejected")

    now = utcnow()
    relationship = await uow.relationships_w.create(
        Relationship(
            id=uuid.uuid4(),
            requester_id=principal.user_id,
            recipient_id=recipient_id,
            status=RelationshipStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
    )
    await uow.commit()
    return relationship


async def accept_request(
    principal: Principal,
    relationship_id: uuid.UUID,
    uow: UnitOfWork,
) -> Relationship:
    return await _answer_request(principal, relationship_id, RelationshipStatus.ACCEPTED, uow)


async def reject_request(
    principal: Principal,
    relationship_id: uuid.UUID,
    uow: UnitOfWork,
) -> Relationship:
    return await _answer_request(principal, relationship_id, RelationshipStatus.REJECTED, uow)


async def _answer_request(
    principal: Principal,
    relationship_id: uuid.UUID,
    status: RelationshipStatus,
    uow: UnitOfWork,
) -> Relationship:
    relationship = await uow.relationships.get_by_id(relationship_id)
    if (
        relationship is None
        or relationship.recipient_id != principal.user_id
        or relationship.status != RelationshipStatus.PENDING
    ):
        raise NotFoundError("Request does not exist or already processed")

    await uow.relationships_w.set_status(relationship_id, status)
    await uow.commit()
    updated = await uow.relationships.get_by_id(relationship_id)
    return updated or relationship


async def remove_friend(
    principal: Principal,
    friend_id: uuid.UUID,
    uow: UnitOfWork,
) -> None:
    """End an accepted friendship. Either side may remove it."""
    relationship = await uow.relationships.find_accepted(principal.user_id, friend_id)
    if relationship is None:
        raise NotFoundError("You are not friends with this user")

    await uow.relationships_w.delete(relationship.id)
    await uow.commit()


def friendship_status(
    account: Account,
    user_id: uuid.UUID,
    relationships: list[Relationship],
) -> UserWithFriendship:
    """Describe how ``account`` relates to ``user_id``."""
    if account.id == user_id:
        return UserWithFriendship(account, FriendshipStatus.SELF)

    relationship = next((r for r in relationships if r.involves(account.id)), None)
    if relationship is None:
        return UserWithFriendship(account, FriendshipStatus.NONE)

    if relationship.status == RelationshipStatus.ACCEPTED:
        status = FriendshipStatus.FRIENDS
    elif relationship.status == RelationshipStatus.PENDING:
        status = (
            FriendshipStatus.REQUEST_SENT
            if relationship.requester_id == user_id
            else FriendshipStatus.REQUEST_RECEIVED
        )
    else:
        status = FriendshipStatus.REJECTED
    return UserWithFriendship(account, status, relationship.id)


async def list_users(
    principal: Principal,
    skip: int,
    limit: int,
    uow: UnitOfWork,
) -> list[UserWithFriendship]:
    accounts = await uow.accounts.list_accounts(skip=skip, limit=limit)
    relationships = await uow.relationships.list_for_user(principal.user_id)
    return [friendship_status(a, principal.user_id, relationships) for a in accounts]


async def search_users(
    principal: Principal,
    query: str,
    uow: UnitOfWork,
) -> list[Account]:
    query = query.strip()
    if not query:
        raise ValidationError("Please provide a search query")
    return await uow.accounts.search(query, exclude_id=principal.user_id)
