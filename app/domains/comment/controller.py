"""Comment API controller with FastAPI endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Request

from app.core.dependencies import get_optional_user, get_store
from app.domains.comment.service import CommentService
from app.schemas.base import ResponseSchema
from app.schemas.post import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    CommentUpdate,
    LikeResponse,
)
from app.store.base import RecordStore
from app.store.records import UserRecord

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/rooms/{room_id}/posts/{post_id}/comments",
    tags=["comments"],
)


@router.get("", response_model=CommentListResponse)
async def list_comments(
    room_id: str = Path(..., description="Room ID"),
    post_id: str = Path(..., description="Post ID"),
    store: RecordStore = Depends(get_store),
):
    """List comments oldest first; deleted ones show placeholder content."""

    service = CommentService(store)
    comments = await service.list_comments(room_id, post_id)
    return CommentListResponse(
        comments=[CommentResponse.from_record(c) for c in comments],
        total=len(comments),
    )


@router.post("", response_model=ResponseSchema, status_code=201)
async def create_comment(
    request: Request,
    comment_data: CommentCreate,
    room_id: str = Path(..., description="Room ID"),
    post_id: str = Path(..., description="Post ID"),
    current_user: Optional[UserRecord] = Depends(get_optional_user),
    store: RecordStore = Depends(get_store),
):
    """Create a comment or a reply."""

    service = CommentService(store)
    comment = await service.create_comment(
        room_id, post_id, comment_data, user_id=current_user.id if current_user else None
    )

    return ResponseSchema(
        status="success",
        message="Comment created successfully",
        data=CommentResponse.from_record(comment).model_dump(),
    )


@router.get("/{comment_id}", response_model=ResponseSchema)
async def get_comment(
    room_id: str = Path(..., description="Room ID"),
    post_id: str = Path(..., description="Post ID"),
    comment_id: str = Path(..., description="Comment ID"),
    store: RecordStore = Depends(get_store),
):
    service = CommentService(store)
    comment = await service.get_comment(room_id, post_id, comment_id)

    return ResponseSchema(
        status="success",
        message="Comment retrieved successfully",
        data=CommentResponse.from_record(comment).model_dump(),
    )


@router.put("/{comment_id}", response_model=ResponseSchema)
async def update_comment(
    comment_data: CommentUpdate,
    room_id: str = Path(..., description="Room ID"),
    post_id: str = Path(..., description="Post ID"),
    comment_id: str = Path(..., description="Comment ID"),
    store: RecordStore = Depends(get_store),
):
    """Edit a comment's content."""

    service = CommentService(store)
    comment = await service.update_comment(room_id, post_id, comment_id, comment_data)

    return ResponseSchema(
        status="success",
        message="Comment updated successfully",
        data=CommentResponse.from_record(comment).model_dump(),
    )


@router.delete("/{comment_id}", response_model=ResponseSchema)
async def delete_comment(
    room_id: str = Path(..., description="Room ID"),
    post_id: str = Path(..., description="Post ID"),
    comment_id: str = Path(..., description="Comment ID"),
    store: RecordStore = Depends(get_store),
):
    """Soft-delete a comment."""

    service = CommentService(store)
    comment = await service.delete_comment(room_id, post_id, comment_id)

    return ResponseSchema(
        status="success",
        message="Comment deleted successfully",
        data=CommentResponse.from_record(comment).model_dump(),
    )


@router.post("/{comment_id}/like", response_model=LikeResponse)
async def like_comment(
    room_id: str = Path(..., description="Room ID"),
    post_id: str = Path(..., description="Post ID"),
    comment_id: str = Path(..., description="Comment ID"),
    store: RecordStore = Depends(get_store),
):
    service = CommentService(store)
    comment = await service.like_comment(room_id, post_id, comment_id)
    return LikeResponse(id=comment.id, likes=comment.likes)
