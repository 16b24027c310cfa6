"""Upload signing schemas."""

from pydantic import Field, field_validator

from .base import BaseSchema


class UploadSignRequest(BaseSchema):
    """Schema for requesting a signed upload URL."""

    filename: str = Field(..., min_length=1, max_length=255)

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """Validate that filename is not blank."""
        v = v.strip()
        if not v:
            raise ValueError("Filename cannot be empty")
        return v


class UploadSignResponse(BaseSchema):
    """Everything a client needs to PUT the file and link to it afterwards."""

    id: str
    filename: str
    signature: str
    upload_url: str
    file_url: str


class UploadResponse(BaseSchema):
    file_url: str
    size: int
