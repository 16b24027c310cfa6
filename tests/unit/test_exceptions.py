"""
Unit tests for Exception classes.

This module contains unit tests for custom exception classes used throughout
the application.
"""

import pytest
from fastapi import HTTPException, status

from app.exceptions.ai import (
    AIConfigurationError,
    AIContentFilterError,
    AIInvalidRequestError,
    AIParsingError,
    AIQuotaExceededError,
    AIRateLimitError,
    AIServiceError,
    AIServiceUnavailableError,
    AITimeoutError,
)
from app.exceptions.base import (
    AppPermissionError,
    BaseAppException,
    NotFoundError,
    PreconditionFailedError,
)
from app.exceptions.community import (
    CommentNotFoundError,
    InvalidCommentOperationError,
    NoPostsToAnalyzeError,
    PostNotFoundError,
    RoomNotFoundError,
)
from app.exceptions.upload import (
    InvalidUploadParamsError,
    InvalidUploadSignatureError,
    UploadTooLargeError,
)
from app.exceptions.user import (
    AuthenticationRequiredError,
    InvalidCredentialsError,
    UserAlreadyExistsError,
)


class TestBaseAppException:
    """Test cases for BaseAppException."""

    def test_base_exception_default_values(self):
        """Test BaseAppException with default values."""
        exc = BaseAppException("Test error")

        assert isinstance(exc, HTTPException)
        assert exc.message == "Test error"
        assert exc.status_code == 500
        assert exc.error_code == "INTERNAL_ERROR"
        assert exc.details == {}
        assert exc.detail == {"message": "Test error", "error_code": "INTERNAL_ERROR", "details": {}}
        assert str(exc) == "Test error"

    def test_instance_overrides(self):
        exc = BaseAppException("Teapot", status_code=418, error_code="TEAPOT", details={"k": "v"})

        assert exc.status_code == 418
        assert exc.error_code == "TEAPOT"
        assert BaseAppException("Other").error_code == "INTERNAL_ERROR"

    def test_default_message(self):
        assert str(RoomNotFoundError()) == "Room not found"
        assert CommentNotFoundError("Parent comment not found").status_code == 404

    def test_precondition_failed(self):
        exc = PreconditionFailedError("Category is required", error_code="CATEGORY_REQUIRED")

        assert exc.status_code == status.HTTP_400_BAD_REQUEST
        assert exc.detail["error_code"] == "CATEGORY_REQUIRED"


class TestDomainExceptions:
    @pytest.mark.parametrize(
        "exc, status_code, error_code",
        [
            (RoomNotFoundError(), 404, "ROOM_NOT_FOUND"),
            (PostNotFoundError(), 404, "POST_NOT_FOUND"),
            (CommentNotFoundError(), 404, "COMMENT_NOT_FOUND"),
            (InvalidCommentOperationError(), 400, "INVALID_COMMENT_OPERATION"),
            (NoPostsToAnalyzeError(), 400, "NO_POSTS_TO_ANALYZE"),
            (UserAlreadyExistsError(), 400, "USER_ALREADY_EXISTS"),
            (InvalidCredentialsError(), 401, "INVALID_CREDENTIALS"),
            (AuthenticationRequiredError(), 401, "AUTHENTICATION_REQUIRED"),
            (InvalidUploadParamsError(), 400, "INVALID_UPLOAD_PARAMS"),
            (InvalidUploadSignatureError(), 403, "INVALID_UPLOAD_SIGNATURE"),
            (UploadTooLargeError(1024), 413, "UPLOAD_TOO_LARGE"),
        ],
    )
    def test_status_and_code(self, exc, status_code, error_code):
        assert exc.status_code == status_code
        assert exc.error_code == error_code
        assert exc.detail["error_code"] == error_code

    def test_not_found_hierarchy(self):
        assert isinstance(RoomNotFoundError(), NotFoundError)
        assert isinstance(InvalidUploadSignatureError(), AppPermissionError)
        assert isinstance(NoPostsToAnalyzeError(), PreconditionFailedError)


class TestAIExceptions:
    """Test cases for AI exception classes."""

    @pytest.mark.parametrize(
        "exc_class, status_code, error_code",
        [
            (AIServiceError, 500, "AI_SERVICE_ERROR"),
            (AIServiceUnavailableError, 503, "AI_SERVICE_UNAVAILABLE"),
            (AIQuotaExceededError, 503, "AI_QUOTA_EXCEEDED"),
            (AIInvalidRequestError, 400, "AI_INVALID_REQUEST"),
            (AITimeoutError, 504, "AI_TIMEOUT"),
            (AIParsingError, 502, "AI_PARSING_ERROR"),
            (AIConfigurationError, 503, "AI_CONFIGURATION_ERROR"),
            (AIContentFilterError, 502, "AI_CONTENT_FILTERED"),
            (AIRateLimitError, 503, "AI_RATE_LIMITED"),
        ],
    )
    def test_defaults(self, exc_class, status_code, error_code):
        exc = exc_class()

        assert exc.status_code == status_code
        assert exc.error_code == error_code
        assert isinstance(exc, AIServiceError)

    def test_rate_limit_retry_after(self):
        exc = AIRateLimitError("Too fast", retry_after=12)

        assert exc.details == {"retry_after": 12}
        assert AIRateLimitError().details == {}

    def test_retry_after_property(self):
        assert AIRateLimitError(retry_after=5).retry_after == 5
        assert AIQuotaExceededError(details={"retry_after": 30}).retry_after == 30
        assert AITimeoutError().retry_after is None

    def test_message_override_keeps_class_status(self):
        exc = AIParsingError("Failed to parse AI room quality response", details={"stage": "room quality"})

        assert exc.status_code == 502
        assert exc.message == "Failed to parse AI room quality response"
        assert exc.detail["details"] == {"stage": "room quality"}
