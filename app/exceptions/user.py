"""User and session exceptions."""

from .base import BaseAppException


class UserAlreadyExistsError(BaseAppException):
    status_code = 400
    error_code = "USER_ALREADY_EXISTS"
    default_message = "This email is already registered"


class InvalidCredentialsError(BaseAppException):
    """Raised when the email/password pair does not match."""

    status_code = 401
    error_code = "INVALID_CREDENTIALS"
    default_message = "Email or password is incorrect"


class AuthenticationRequiredError(BaseAppException):
    """Raised when an endpoint needs a signed-in user and none is present."""

    status_code = 401
    error_code = "AUTHENTICATION_REQUIRED"
    default_message = "Authentication required"
