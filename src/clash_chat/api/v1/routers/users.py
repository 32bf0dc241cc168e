from __future__ import annotations

from fastapi import APIRouter, Query

from clash_chat.api.deps import CurrentPrincipal, UoWDep
from clash_chat.api.v1.schemas.user import AccountResponse, UserWithFriendshipResponse
from clash_chat.services import friend_service

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("", response_model=list[UserWithFriendshipResponse])
async def list_users(
    principal: CurrentPrincipal,
    uow: UoWDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> list[UserWithFriendshipResponse]:
    users = await friend_service.list_users(principal, skip, limit, uow)
    return [UserWithFriendshipResponse.from_dto(u) for u in users]


@router.get("/search", response_model=list[AccountResponse])
async def search_users(
    principal: CurrentPrincipal,
    uow: UoWDep,
    query: str = Query(""),
) -> list[AccountResponse]:
    accounts = await friend_service.search_users(principal, query, uow)
    return [AccountResponse.model_validate(a) for a in accounts]
