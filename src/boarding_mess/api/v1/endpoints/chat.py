"""Group chat endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status

from boarding_mess.api.v1.dependencies import (
    AdminDep,
    ClockDep,
    CurrentMemberDep,
    SessionDep,
    http_error,
)
from boarding_mess.models import ChatMessage
from boarding_mess.schemas.chat import ChatMessageCreate, ChatMessageResponse
from boarding_mess.services.chat import ChatService
from boarding_mess.services.errors import MessError

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("/", response_model=list[ChatMessageResponse])
async def list_messages(
    _member: CurrentMemberDep,
    db: SessionDep,
    clock: ClockDep,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    before: Annotated[int | None, Query(description="Return messages with a smaller id")] = None,
) -> list[ChatMessage]:
    """Return recent messages, oldest first."""
    return ChatService(db, clock=clock).list_messages(limit=limit, before=before)


@router.post("/", response_model=ChatMessageResponse, status_code=status.HTTP_201_CREATED)
async def post_message(
    payload: ChatMessageCreate,
    current_member: CurrentMemberDep,
    db: SessionDep,
    clock: ClockDep,
) -> ChatMessage:
    service = ChatService(db, clock=clock)
    try:
        return service.post_message(current_member, payload.body, payload.mentions)
    except MessError as err:
        raise http_error(err) from err
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(err),
        ) from err


@router.post("/purge")
async def purge_messages(
    _admin: AdminDep,
    db: SessionDep,
    clock: ClockDep,
    days: Annotated[int | None, Query(ge=0)] = None,
) -> dict[str, int]:
    """Delete messages older than the retention horizon."""
    return {"deleted": ChatService(db, clock=clock).purge_older_than(days)}
