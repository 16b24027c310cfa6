"""Base exception classes.

Every application error is an ``HTTPException`` whose ``detail`` carries the
message, a machine-readable ``error_code`` and optional ``details``; the
handlers in ``app.main`` turn that into the JSON error envelope.
"""

from typing import Any

from fastapi import HTTPException


class BaseAppException(HTTPException):
    """Base application exception.

    Subclasses declare ``status_code``, ``error_code`` and ``default_message``
    as class attributes and only override ``__init__`` when they need extra
    arguments.
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message or self.default_message
        self.error_code = error_code or type(self).error_code
        self.details = details or {}

        super().__init__(
            status_code=status_code or type(self).status_code,
            detail={"message": self.message, "error_code": self.error_code, "details": self.details},
            headers=headers,
        )

    def __str__(self) -> str:
        return self.message


class NotFoundError(BaseAppException):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class AppPermissionError(BaseAppException):
    status_code = 403
    error_code = "PERMISSION_DENIED"
    default_message = "Permission denied"


class PreconditionFailedError(BaseAppException):
    """The request is well-formed but the current state does not allow it."""

    status_code = 400
    error_code = "PRECONDITION_FAILED"
    default_message = "Precondition failed"
