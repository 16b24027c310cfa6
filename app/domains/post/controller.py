"""Post API controller with FastAPI endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, Request

from app.core.dependencies import get_optional_user, get_store
from app.domains.post.service import PostService
from app.schemas.base import ResponseSchema
from app.schemas.post import LikeResponse, PostCreate, PostListResponse, PostResponse
from app.shared.pagination import MAX_PAGE_LIMIT
from app.store.base import RecordStore
from app.store.records import UserRecord

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/rooms/{room_id}/posts",
    tags=["posts"],
)


@router.get("", response_model=PostListResponse)
async def list_posts(
    room_id: str = Path(..., description="Room ID"),
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_LIMIT),
    store: RecordStore = Depends(get_store),
):
    """List the room's posts, newest first."""

    service = PostService(store)
    posts = await service.list_posts(room_id, limit)
    return PostListResponse(posts=[PostResponse.model_validate(p) for p in posts])


@router.post("", response_model=ResponseSchema, status_code=201)
async def create_post(
    request: Request,
    post_data: PostCreate,
    room_id: str = Path(..., description="Room ID"),
    current_user: Optional[UserRecord] = Depends(get_optional_user),
    store: RecordStore = Depends(get_store),
):
    """Create a new post."""

    service = PostService(store)
    post = await service.create_post(
        room_id, post_data, user_id=current_user.id if current_user else None
    )

    return ResponseSchema(
        status="success",
        message="Post created successfully",
        data=PostResponse.model_validate(post).model_dump(),
    )


@router.get("/{post_id}", response_model=ResponseSchema)
async def get_post(
    room_id: str = Path(..., description="Room ID"),
    post_id: str = Path(..., description="Post ID"),
    store: RecordStore = Depends(get_store),
):
    """Get a specific post by ID."""

    service = PostService(store)
    post = await service.get_post(room_id, post_id)

    return ResponseSchema(
        status="success",
        message="Post retrieved successfully",
        data=PostResponse.model_validate(post).model_dump(),
    )


@router.post("/{post_id}/views", response_model=ResponseSchema)
async def increment_views(
    room_id: str = Path(..., description="Room ID"),
    post_id: str = Path(..., description="Post ID"),
    store: RecordStore = Depends(get_store),
):
    """Count one view."""

    service = PostService(store)
    post = await service.increment_views(room_id, post_id)

    return ResponseSchema(status="success", data={"id": post.id, "views": post.views})


@router.post("/{post_id}/like", response_model=LikeResponse)
async def like_post(
    room_id: str = Path(..., description="Room ID"),
    post_id: str = Path(..., description="Post ID"),
    store: RecordStore = Depends(get_store),
):
    service = PostService(store)
    post = await service.like_post(room_id, post_id)
    return LikeResponse(id=post.id, likes=post.likes)
