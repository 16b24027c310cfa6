"""AI schemas for request/response serialization.

The ``Content*``/``Post*``/``Room*`` contract models describe the JSON the
text-generation service is asked to return. They accept the camelCase keys
used in the prompts as well as snake_case, and always serialize snake_case.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .base import BaseSchema


class LLMContract(BaseSchema):
    """Base for objects parsed out of model responses."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ContentJudgment(LLMContract):
    """Verdict on whether chat text can become a post."""

    has_content: bool
    reason: str = ""
    content_type: str = ""


class PostDraft(LLMContract):
    """Generated post title and body."""

    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)

    @field_validator("title", "content")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Reject whitespace-only drafts."""
        v = v.strip()
        if not v:
            raise ValueError("Draft fields cannot be empty")
        return v


class PostAnalysisJudgment(LLMContract):
    """Whether a post deserves a critique at all."""

    should_analyze: bool
    reason: str = ""
    content_type: str = ""


class ContentValidity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PostCritique(LLMContract):
    controversy: str = ""
    validity: str = ""
    suggestions: str = ""


class PostAnalysis(LLMContract):
    """Structured critique of a single post."""

    has_debatable_content: bool
    content_validity: ContentValidity
    analysis: PostCritique
    summary: str = ""

    @field_validator("content_validity", mode="before")
    @classmethod
    def normalize_validity(cls, v):
        """Models sometimes answer ``"High"``."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class RoomQualityScores(LLMContract):
    """Five-dimension rubric, each scored 0-100."""

    content_depth: int = Field(..., ge=0, le=100)
    logical_thinking: int = Field(..., ge=0, le=100)
    discussion_quality: int = Field(..., ge=0, le=100)
    creativity: int = Field(..., ge=0, le=100)
    practicality: int = Field(..., ge=0, le=100)


class RoomQualityAnalysis(LLMContract):
    """Room-level quality report."""

    scores: RoomQualityScores
    overall_score: int = Field(..., ge=0, le=100)
    strengths: list[str] = []
    weaknesses: list[str] = []
    recommendations: list[str] = []
    summary: str = ""


class SyncOutcome(str, Enum):
    """Terminal outcomes of the chat-to-post pipeline."""

    GENERATED = "generated"
    INSUFFICIENT_CONTENT = "insufficient_content"
    NO_MESSAGES = "no_messages"
    NO_NEW_MESSAGES = "no_new_messages"


class PostPreviewRequest(BaseSchema):
    """Schema for requesting a chat-to-post preview."""

    user_id: str | None = Field(
        None, max_length=255, description="Message author to sync; defaults to the signed-in user"
    )
    message_count: int | None = Field(
        None, ge=1, le=200, description="Requested sample size; every unsynced message is still read"
    )


class ChatToPostResult(BaseSchema):
    """Preview produced by the pipeline. Nothing is persisted."""

    outcome: SyncOutcome
    post: PostDraft | None = None
    summary: str | None = None
    message_count: int = 0
    reason: str | None = None
    content_type: str | None = None
    message: str | None = None

    @property
    def is_terminal_without_messages(self) -> bool:
        return self.outcome in (SyncOutcome.NO_MESSAGES, SyncOutcome.NO_NEW_MESSAGES)


class PostConfirmRequest(BaseSchema):
    """Schema for publishing a (possibly edited) preview."""

    user_id: str | None = Field(None, max_length=255)
    title: str = Field(..., min_length=2, max_length=500)
    content: str = Field(..., min_length=2)

    @field_validator("title", "content")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Title and content need at least two non-blank characters."""
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Must be at least 2 characters")
        return v


class RecordSyncRequest(BaseSchema):
    user_id: str | None = Field(None, max_length=255)


class SyncCursorResponse(BaseSchema):
    room_id: str
    user_id: str
    synced_at: datetime


class PostAnalysisResponse(BaseSchema):
    """Schema for post analysis response."""

    post_id: str
    should_analyze: bool
    reason: str = ""
    content_type: str = ""
    analysis: PostAnalysis | None = None
    analysis_timestamp: datetime


class RoomQualityResponse(BaseSchema):
    """Schema for room quality analysis response."""

    room_id: str
    post_count: int
    analysis: RoomQualityAnalysis
    analysis_timestamp: datetime


class AIServiceStatus(BaseSchema):
    """Schema for AI service status."""

    service_available: bool
    model_name: str


class AIErrorResponse(BaseSchema):
    """Schema for AI service errors."""

    error_code: str
    error_message: str
    retry_after: int | None = Field(None, description="Seconds to wait before retrying")
    suggestions: list[str] = []
