from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from clash_chat.api.deps import CurrentPrincipal, UoWDep
from clash_chat.api.v1.schemas.friend import (
    FriendRequestCreate,
    IncomingRequestResponse,
    RelationshipResponse,
)
from clash_chat.api.v1.schemas.user import AccountResponse
from clash_chat.services import friend_service

router = APIRouter(prefix="/api/v1/friends", tags=["friends"])


@router.get("", response_model=list[AccountResponse])
async def list_friends(principal: CurrentPrincipal, uow: UoWDep) -> list[AccountResponse]:
    friends = await friend_service.list_friends(principal, uow)
    return [AccountResponse.model_validate(f) for f in friends]


@router.get("/requests", response_model=list[IncomingRequestResponse])
async def list_requests(
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> list[IncomingRequestResponse]:
    pending = await friend_service.list_incoming_requests(principal, uow)
    return [IncomingRequestResponse.from_pair(r, a) for r, a in pending]


@router.post("/requests", response_model=RelationshipResponse, status_code=201)
async def send_request(
    body: FriendRequestCreate,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> RelationshipResponse:
    relationship = await friend_service.send_request(principal, body.recipient_id, uow)
    return RelationshipResponse.model_validate(relationship)


@router.post("/requests/{request_id}/accept", response_model=RelationshipResponse)
async def accept_request(
    request_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> RelationshipResponse:
    relationship = await friend_service.accept_request(principal, request_id, uow)
    return RelationshipResponse.model_validate(relationship)


@router.post("/requests/{request_id}/reject", response_model=RelationshipResponse)
async def reject_request(
    request_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> RelationshipResponse:
    relationship = await friend_service.reject_request(principal, request_id, uow)
    return RelationshipResponse.model_validate(relationship)


@router.delete("/{friend_id}", status_code=204)
async def remove_friend(
    friend_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> None:
    await friend_service.remove_friend(principal, friend_id, uow)
