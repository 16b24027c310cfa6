"""Upload exceptions."""

from .base import AppPermissionError, BaseAppException, PreconditionFailedError


class InvalidUploadParamsError(PreconditionFailedError):
    """Raised when the upload id or file name is missing or malformed."""

    error_code = "INVALID_UPLOAD_PARAMS"
    default_message = "Invalid upload parameters"


class InvalidUploadSignatureError(AppPermissionError):
    error_code = "INVALID_UPLOAD_SIGNATURE"
    default_message = "Invalid upload signature"


class UploadTooLargeError(BaseAppException):
    """Raised when the uploaded body exceeds the configured maximum size."""

    status_code = 413
    error_code = "UPLOAD_TOO_LARGE"

    def __init__(self, max_size: int):
        super().__init__(
            message=f"File exceeds the maximum size of {max_size} bytes",
            details={"max_size": max_size},
        )
