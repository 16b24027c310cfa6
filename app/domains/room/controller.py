"""Room API controller: rooms, chat messages and category presets."""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Request

from app.core.dependencies import get_optional_user, get_store
from app.domains.room.service import RoomService
from app.schemas.base import ResponseSchema
from app.schemas.room import (
    CategoryListResponse,
    CategoryRequest,
    MessageCreate,
    MessageListResponse,
    MessageResponse,
    RoomCreate,
    RoomListResponse,
)
from app.shared.pagination import MAX_PAGE_LIMIT, next_cursor
from app.store.base import RecordStore
from app.store.records import UserRecord

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/rooms",
    tags=["rooms"],
)


@router.get("", response_model=RoomListResponse)
async def list_rooms(
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_LIMIT),
    store: RecordStore = Depends(get_store),
):
    """List rooms, newest first."""

    service = RoomService(store)
    rooms = await service.list_rooms(limit)
    return RoomListResponse(rooms=rooms)


@router.post("", response_model=ResponseSchema, status_code=201)
async def create_room(
    request: Request,
    room_data: RoomCreate,
    store: RecordStore = Depends(get_store),
):
    """Create a new room."""

    service = RoomService(store)
    room = await service.create_room(room_data)

    return ResponseSchema(
        status="success",
        message="Room created successfully",
        data={"id": room.id},
    )


@router.get("/{room_id}", response_model=ResponseSchema)
async def get_room(
    room_id: str = Path(..., description="Room ID"),
    store: RecordStore = Depends(get_store),
):
    """Get a room with member metadata and category presets."""

    service = RoomService(store)
    room = await service.get_room_detail(room_id)

    return ResponseSchema(
        status="success",
        message="Room retrieved successfully",
        data=room.model_dump(),
    )


@router.get("/{room_id}/messages", response_model=MessageListResponse)
async def list_messages(
    room_id: str = Path(..., description="Room ID"),
    cursor: Optional[int] = Query(None, ge=0, description="Last sequence number seen"),
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_LIMIT),
    store: RecordStore = Depends(get_store),
):
    """Latest messages, or the ones after ``cursor`` when given."""

    service = RoomService(store)
    messages = await service.list_messages(room_id, cursor, limit)

    return MessageListResponse(
        messages=[MessageResponse.model_validate(m) for m in messages],
        next_cursor=next_cursor([m.seq for m in messages], cursor),
    )


@router.post("/{room_id}/messages", response_model=ResponseSchema, status_code=201)
async def post_message(
    request: Request,
    message_data: MessageCreate,
    room_id: str = Path(..., description="Room ID"),
    current_user: Optional[UserRecord] = Depends(get_optional_user),
    store: RecordStore = Depends(get_store),
):
    """Append a chat message."""

    service = RoomService(store)
    message = await service.post_message(
        room_id, message_data, user_id=current_user.id if current_user else None
    )

    return ResponseSchema(
        status="success",
        message="Message sent",
        data=MessageResponse.model_validate(message).model_dump(),
    )


@router.get("/{room_id}/categories", response_model=CategoryListResponse)
async def list_categories(
    room_id: str = Path(..., description="Room ID"),
    store: RecordStore = Depends(get_store),
):
    service = RoomService(store)
    return CategoryListResponse(categories=await service.list_categories(room_id))


@router.post("/{room_id}/categories", response_model=CategoryListResponse)
async def add_category(
    room_id: str = Path(..., description="Room ID"),
    category_data: CategoryRequest = Body(...),
    store: RecordStore = Depends(get_store),
):
    service = RoomService(store)
    return CategoryListResponse(
        categories=await service.add_category(room_id, category_data.category)
    )


@router.delete("/{room_id}/categories", response_model=CategoryListResponse)
async def remove_category(
    room_id: str = Path(..., description="Room ID"),
    category: Optional[str] = Query(None, description="Category to remove"),
    store: RecordStore = Depends(get_store),
):
    service = RoomService(store)
    return CategoryListResponse(categories=await service.remove_category(room_id, category))
