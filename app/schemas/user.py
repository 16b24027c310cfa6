"""User and session schemas for request/response validation."""

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from .base import BaseSchema


class UserSignupRequest(BaseSchema):
    """Schema for user signup request."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=6, max_length=128, description="Password, 6+ characters")
    name: Optional[str] = Field(None, max_length=100, description="Optional display name")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        """Blank names fall back to the email local part."""
        if v is not None:
            v = v.strip()
        return v or None


class UserSigninRequest(BaseSchema):
    """Schema for user signin request."""

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="Password")


class UserResponse(BaseSchema):
    """Public view of a user; never carries the password hash."""

    id: str
    email: str
    name: str
    created_at: datetime


class AuthResponse(BaseSchema):
    """Schema for authentication response."""

    user: UserResponse
    message: str = "Authentication successful"


class CurrentUserResponse(BaseSchema):
    """``user`` is None for anonymous requests."""

    user: Optional[UserResponse] = None
