"""AI API controller with FastAPI endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Path, Request, status
from fastapi.responses import JSONResponse

from app.core.dependencies import get_optional_user, get_store, get_text_client
from app.domains.ai.client import DEFAULT_RETRY_AFTER, TextGenerationClient
from app.domains.ai.service import AIService
from app.exceptions.ai import AIRateLimitError, AIServiceError
from app.exceptions.base import PreconditionFailedError
from app.schemas.ai import (
    AIErrorResponse,
    PostConfirmRequest,
    PostPreviewRequest,
    RecordSyncRequest,
    SyncCursorResponse,
)
from app.schemas.base import ResponseSchema
from app.schemas.post import PostResponse
from app.shared.identifiers import resolve_author
from app.store.base import RecordStore
from app.store.records import UserRecord

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/rooms",
    tags=["ai"],
)

_ERROR_MESSAGES = {
    "AI_CONFIGURATION_ERROR": "AI service is not properly configured",
    "AI_QUOTA_EXCEEDED": "AI service quota exceeded",
    "AI_RATE_LIMITED": "Rate limit exceeded",
    "AI_TIMEOUT": "AI request timed out",
    "AI_SERVICE_UNAVAILABLE": "AI service is temporarily unavailable",
    "AI_CONTENT_FILTERED": "Content was blocked by AI safety filters",
    "AI_PARSING_ERROR": "AI response could not be understood",
    "AI_INVALID_REQUEST": "Invalid request to AI service",
}

_SUGGESTIONS = {
    "AI_CONFIGURATION_ERROR": ["Check AI service configuration", "Contact administrator"],
    "AI_QUOTA_EXCEEDED": ["Try again later", "Upgrade service plan if available"],
    "AI_RATE_LIMITED": ["Wait before making another request"],
    "AI_TIMEOUT": ["Try again with fewer messages", "Check network connectivity"],
    "AI_SERVICE_UNAVAILABLE": ["Try again later", "Check service status"],
    "AI_CONTENT_FILTERED": ["Rephrase the content and try again"],
    "AI_PARSING_ERROR": ["Try again; the model returned an unexpected format"],
}


def _resolve_user_id(requested: Optional[str], current_user: Optional[UserRecord]) -> str:
    """Same rule as message authors, so a signed-in user syncs their own chat."""
    user_id = resolve_author(requested, current_user.id if current_user else None)
    if user_id:
        return user_id
    raise PreconditionFailedError("A user id is required", error_code="USER_ID_REQUIRED")


def get_ai_service(
    store: RecordStore = Depends(get_store),
    client: TextGenerationClient = Depends(get_text_client),
) -> AIService:
    return AIService(store, client)


@router.post("/{room_id}/ai/generate-posts", response_model=ResponseSchema)
async def generate_posts(
    request: Request,
    room_id: str = Path(..., description="Room ID"),
    preview_request: Optional[PostPreviewRequest] = Body(None),
    current_user: Optional[UserRecord] = Depends(get_optional_user),
    service: AIService = Depends(get_ai_service),
):
    """Run the chat-to-post pipeline and return a preview; nothing is saved."""

    preview_request = preview_request or PostPreviewRequest()
    user_id = _resolve_user_id(preview_request.user_id, current_user)
    try:
        result = await service.generate_post_preview(
            room_id=room_id, user_id=user_id, message_count=preview_request.message_count
        )
    except AIServiceError as e:
        return _handle_ai_service_error(e)

    if result.is_terminal_without_messages:
        raise PreconditionFailedError(
            result.message,
            error_code=result.outcome.value.upper(),
            details={"outcome": result.outcome.value},
        )

    return ResponseSchema(
        status="success",
        message=result.message,
        data=result.model_dump(),
    )


@router.post("/{room_id}/ai/confirm", response_model=ResponseSchema, status_code=201)
async def confirm_post(
    request: Request,
    room_id: str = Path(..., description="Room ID"),
    confirm_request: PostConfirmRequest = Body(...),
    current_user: Optional[UserRecord] = Depends(get_optional_user),
    service: AIService = Depends(get_ai_service),
):
    """Publish a reviewed preview and advance the sync cursor."""

    user_id = _resolve_user_id(confirm_request.user_id, current_user)
    post, synced_at = await service.publish_post(
        room_id=room_id,
        user_id=user_id,
        title=confirm_request.title,
        content=confirm_request.content,
    )

    return ResponseSchema(
        status="success",
        message="Post published successfully",
        data={
            "post": PostResponse.model_validate(post).model_dump(),
            "sync": SyncCursorResponse(
                room_id=room_id, user_id=user_id, synced_at=synced_at
            ).model_dump(),
        },
    )


@router.post("/{room_id}/ai/record-sync", response_model=ResponseSchema)
async def record_sync(
    request: Request,
    room_id: str = Path(..., description="Room ID"),
    sync_request: Optional[RecordSyncRequest] = Body(None),
    current_user: Optional[UserRecord] = Depends(get_optional_user),
    service: AIService = Depends(get_ai_service),
):
    """Advance the sync cursor for a post created through the posts endpoint."""

    sync_request = sync_request or RecordSyncRequest()
    user_id = _resolve_user_id(sync_request.user_id, current_user)
    synced_at = await service.record_sync(room_id, user_id)

    return ResponseSchema(
        status="success",
        message="AI sync timestamp recorded",
        data=SyncCursorResponse(room_id=room_id, user_id=user_id, synced_at=synced_at).model_dump(),
    )


@router.post("/{room_id}/posts/{post_id}/analyze", response_model=ResponseSchema)
async def analyze_post(
    request: Request,
    room_id: str = Path(..., description="Room ID"),
    post_id: str = Path(..., description="Post ID"),
    service: AIService = Depends(get_ai_service),
):
    """Critique a single post."""

    try:
        result = await service.analyze_post(room_id, post_id)
    except AIServiceError as e:
        return _handle_ai_service_error(e)

    return ResponseSchema(
        status="success",
        message=(
            "Post analyzed successfully"
            if result.should_analyze
            else "This post does not need analysis"
        ),
        data=result.model_dump(),
    )


@router.post("/{room_id}/quality-analysis", response_model=ResponseSchema)
async def analyze_room_quality(
    request: Request,
    room_id: str = Path(..., description="Room ID"),
    service: AIService = Depends(get_ai_service),
):
    """Score the room's posts against the quality rubric."""

    try:
        result = await service.analyze_room_quality(room_id)
    except AIServiceError as e:
        return _handle_ai_service_error(e)

    return ResponseSchema(
        status="success",
        message="Room quality analyzed successfully",
        data=result.model_dump(),
    )


def _handle_ai_service_error(error: AIServiceError) -> JSONResponse:
    """Handle AI service errors with the status code carried by the exception."""

    retry_after = error.retry_after
    if retry_after is None and isinstance(error, AIRateLimitError):
        retry_after = DEFAULT_RETRY_AFTER
    headers = {"Retry-After": str(retry_after)} if retry_after is not None else None

    if error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"AI service error ({error.error_code}): {str(error)}")
    else:
        logger.warning(f"AI request rejected ({error.error_code}): {str(error)}")

    return JSONResponse(
        status_code=error.status_code,
        headers=headers,
        content=ResponseSchema(
            status="error",
            message=_ERROR_MESSAGES.get(error.error_code, "AI service encountered an error"),
            data=AIErrorResponse(
                error_code=error.error_code,
                error_message=str(error),
                retry_after=retry_after,
                suggestions=_SUGGESTIONS.get(
                    error.error_code, ["Try again later", "Contact support if problem persists"]
                ),
            ).model_dump(),
        ).model_dump(),
    )
