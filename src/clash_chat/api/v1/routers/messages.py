from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from clash_chat.api.deps import CurrentPrincipal, UoWDep
from clash_chat.api.v1.schemas.message import (
    ChatListResponse,
    ChatResponse,
    HistoryResponse,
    MessageResponse,
    SendMessageRequest,
)
from clash_chat.application.dto.message import SendMessageDTO
from clash_chat.services import message_service

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])


@router.get("/chats", response_model=ChatListResponse)
async def list_chats(
    principal: CurrentPrincipal,
    uow: UoWDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
) -> ChatListResponse:
    chats, total = await message_service.list_chats(principal, skip, limit, uow)
    return ChatListResponse(
        chats=[ChatResponse.from_summary(c) for c in chats],
        total=total,
        has_more=skip + len(chats) < total,
    )


@router.get("/{friend_id}", response_model=HistoryResponse)
async def get_history(
    friend_id: UUID,
    principal: CurrentPrincipal,
    uow: UoWDep,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> HistoryResponse:
    page = await message_service.get_history(principal, friend_id, skip, limit, uow)
    return HistoryResponse(
        messages=[MessageResponse.model_validate(m) for m in page.messages],
        unread_count=page.unread_count,
    )


@router.post("", response_model=MessageResponse, status_code=201)
async def send_message(
    body: SendMessageRequest,
    principal: CurrentPrincipal,
    uow: UoWDep,
) -> MessageResponse:
    dto = SendMessageDTO(
        receiver_id=body.receiver_id,
        content=body.content,
        message_type=body.message_type,
    )
    msg = await message_service.send_message(principal, dto, uow)
    [view] = await message_service.render([msg], uow)
    return MessageResponse.model_validate(view)
