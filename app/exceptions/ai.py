"""Text-generation exceptions.

Each class fixes the HTTP status the AI routes answer with; the controller
copies ``status_code`` and ``error_code`` into the AI error envelope.
"""

from typing import Any

from .base import BaseAppException


class AIServiceError(BaseAppException):
    """Base exception for AI service errors."""

    status_code = 500
    error_code = "AI_SERVICE_ERROR"
    default_message = "AI service error occurred"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message=message, details=details)

    @property
    def retry_after(self) -> int | None:
        return self.details.get("retry_after")


class AIServiceUnavailableError(AIServiceError):
    status_code = 503
    error_code = "AI_SERVICE_UNAVAILABLE"
    default_message = "AI service is temporarily unavailable"


class AIQuotaExceededError(AIServiceError):
    status_code = 503
    error_code = "AI_QUOTA_EXCEEDED"
    default_message = "AI service quota exceeded"


class AIInvalidRequestError(AIServiceError):
    """The model API rejected the request itself (bad argument, too long)."""

    status_code = 400
    error_code = "AI_INVALID_REQUEST"
    default_message = "Invalid request to AI service"


class AITimeoutError(AIServiceError):
    status_code = 504
    error_code = "AI_TIMEOUT"
    default_message = "AI service request timed out"


class AIParsingError(AIServiceError):
    """The model answered, but not in the JSON shape the prompt asked for."""

    status_code = 502
    error_code = "AI_PARSING_ERROR"
    default_message = "Failed to parse AI service response"


class AIConfigurationError(AIServiceError):
    status_code = 503
    error_code = "AI_CONFIGURATION_ERROR"
    default_message = "AI service is not properly configured"


class AIContentFilterError(AIServiceError):
    status_code = 502
    error_code = "AI_CONTENT_FILTERED"
    default_message = "Content was blocked by AI safety filters"


class AIRateLimitError(AIServiceError):
    status_code = 503
    error_code = "AI_RATE_LIMITED"
    default_message = "AI service rate limit exceeded"

    def __init__(
        self,
        message: str | None = None,
        retry_after: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = dict(details or {})
        if retry_after:
            details["retry_after"] = retry_after
        super().__init__(message, details)
