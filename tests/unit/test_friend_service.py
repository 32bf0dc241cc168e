from __future__ import annotations

import pytest

from clash_chat.application.dto.message import SendMessageDTO
from clash_chat.application.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from clash_chat.domain.value_objects.enums import FriendshipStatus, RelationshipStatus
from clash_chat.services import friend_service, message_service
from tests.conftest import FakeUoW, make_account, make_relationship, principal_of


@pytest.fixture
def people(uow: FakeUoW, alice, bob, carol) -> FakeUoW:
    uow.add_accounts(alice, bob, carol)
    return uow


@pytest.mark.asyncio
async def test_send_request_creates_pending(people, alice, bob):
    relationship = await friend_service.send_request(principal_of(alice), bob.id, people)

    assert relationship.status == RelationshipStatus.PENDING
    assert relationship.requester_id == alice.id
    assert relationship.recipient_id == bob.id
    assert people._committed is True


@pytest.mark.asyncio
async def test_send_request_to_self(people, alice):
    with pytest.raises(ValidationError):
        await friend_service.send_request(principal_of(alice), alice.id, people)


@pytest.mark.asyncio
async def test_send_request_to_unknown_user(people, alice):
    with pytest.raises(NotFoundError):
        await friend_service.send_request(principal_of(alice), make_account("ghost").id, people)


@pytest.mark.parametrize(
    "status",
    [RelationshipStatus.PENDING, RelationshipStatus.ACCEPTED, RelationshipStatus.REJECTED],
)
@pytest.mark.asyncio
async def test_send_request_when_pair_exists(people, alice, bob, status):
    people.add_relationships(make_relationship(bob, alice, status=status))

    with pytest.raises(ConflictError):
        await friend_service.send_request(principal_of(alice), bob.id, people)


@pytest.mark.asyncio
async def test_accept_request_by_recipient(people, alice, bob):
    pending = make_relationship(alice, bob, status=RelationshipStatus.PENDING)
    people.add_relationships(pending)

    accepted = await friend_service.accept_request(principal_of(bob), pending.id, people)

    assert accepted.status == RelationshipStatus.ACCEPTED
    assert await friend_service.are_friends(alice.id, bob.id, people)


@pytest.mark.asyncio
async def test_requester_cannot_accept_own_request(people, alice, bob):
    pending = make_relationship(alice, bob, status=RelationshipStatus.PENDING)
    people.add_relationships(pending)

    with pytest.raises(NotFoundError):
        await friend_service.accept_request(principal_of(alice), pending.id, people)


@pytest.mark.asyncio
async def test_reject_then_accept_fails(people, alice, bob):
    pending = make_relationship(alice, bob, status=RelationshipStatus.PENDING)
    people.add_relationships(pending)

    rejected = await friend_service.reject_request(principal_of(bob), pending.id, people)
    assert rejected.status == RelationshipStatus.REJECTED

    with pytest.raises(NotFoundError):
        await friend_service.accept_request(principal_of(bob), pending.id, people)


@pytest.mark.asyncio
async def test_list_friends_and_requests(people, alice, bob, carol):
    people.add_relationships(
        make_relationship(alice, bob),
        make_relationship(carol, alice, status=RelationshipStatus.PENDING),
    )

    friends = await friend_service.list_friends(principal_of(alice), people)
    requests = await friend_service.list_incoming_requests(principal_of(alice), people)

    assert [f.id for f in friends] == [bob.id]
    assert [(r.requester_id, a.username) for r, a in requests] == [(carol.id, "carol")]


@pytest.mark.asyncio
async def test_list_users_annotates_friendship(people, alice, bob, carol):
    dave = make_account("dave")
    people.add_accounts(dave)
    request = make_relationship(alice, carol, status=RelationshipStatus.PENDING)
    people.add_relationships(make_relationship(bob, alice), request)

    users = await friend_service.list_users(principal_of(alice), 0, 20, people)
    by_name = {u.account.username: u for u in users}

    assert by_name["alice"].friendship_status == FriendshipStatus.SELF
    assert by_name["bob"].friendship_status == FriendshipStatus.FRIENDS
    assert by_name["carol"].friendship_status == FriendshipStatus.REQUEST_SENT
    assert by_name["carol"].friend_request_id == request.id
    assert by_name["dave"].friendship_status == FriendshipStatus.NONE


@pytest.mark.asyncio
async def test_list_users_incoming_request(people, alice, bob):
    people.add_relationships(make_relationship(bob, alice, status=RelationshipStatus.PENDING))

    users = await friend_service.list_users(principal_of(alice), 0, 20, people)

    assert {u.account.username: u.friendship_status for u in users}["bob"] == FriendshipStatus.REQUEST_RECEIVED


@pytest.mark.asyncio
async def test_search_users_excludes_caller(people, alice, bob):
    found = await friend_service.search_users(principal_of(alice), "  BO ", people)
    assert [a.id for a in found] == [bob.id]

    assert await friend_service.search_users(principal_of(alice), "alice", people) == []


@pytest.mark.asyncio
async def test_search_users_requires_query(people, alice):
    with pytest.raises(ValidationError):
        await friend_service.search_users(principal_of(alice), "   ", people)


@pytest.mark.asyncio
async def test_remove_friend_ends_messaging(people, alice, bob):
    people.add_relationships(make_relationship(alice, bob))

    await friend_service.remove_friend(principal_of(bob), alice.id, people)

    assert people._committed is True
    assert await friend_service.are_friends(alice.id, bob.id, people) is False
    assert await friend_service.list_friends(principal_of(alice), people) == []
    with pytest.raises(ForbiddenError):
        await message_service.send_message(
            principal_of(alice), SendMessageDTO(receiver_id=bob.id, content="still there?"), people,
        )


@pytest.mark.asyncio
async def test_remove_friend_allows_a_new_request(people, alice, bob):
    people.add_relationships(make_relationship(alice, bob))
    await friend_service.remove_friend(principal_of(alice), bob.id, people)

    relationship = await friend_service.send_request(principal_of(bob), alice.id, people)

    assert relationship.status == RelationshipStatus.PENDING


@pytest.mark.asyncio
async def test_remove_non_friend(people, alice, carol):
    with pytest.raises(NotFoundError):
        await friend_service.remove_friend(principal_of(alice), carol.id, people)


@pytest.mark.asyncio
async def test_remove_friend_leaves_pending_request(people, alice, bob):
    people.add_relationships(make_relationship(alice, bob, status=RelationshipStatus.PENDING))

    with pytest.raises(NotFoundError):
        await friend_service.remove_friend(principal_of(alice), bob.id, people)

    [pending] = await friend_service.list_incoming_requests(principal_of(bob), people)
    assert pending[0].requester_id == alice.id
