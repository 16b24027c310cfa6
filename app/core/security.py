"""Security related functions."""

import hashlib
import hmac
import re
import secrets

from app.core.config import settings

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def hash_password(password: str, secret: str | None = None) -> str:
    """
    Hashes a password as SHA-256 over ``password:secret``.

    :param password: The plain text password.
    :param secret: Salt; defaults to the configured secret key.
    :return: The hex digest.
    """
    salt = settings.secret_key if secret is None else secret
    return hashlib.sha256(f"{password}:{salt}".encode()).hexdigest()


def verify_password(password: str, password_hash: str, secret: str | None = None) -> bool:
    """Constant-time comparison of a password against a stored hash."""
    return hmac.compare_digest(hash_password(password, secret), password_hash)


def generate_session_token() -> str:
    """Opaque, URL-safe session token."""
    return secrets.token_urlsafe(32)


def sanitize_filename(filename: str) -> str:
    """Replace anything outside ``[A-Za-z0-9._-]`` with ``_``."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def sign_upload(upload_id: str, filename: str, secret: str | None = None) -> str:
    """
    HMAC-SHA256 signature over ``id:filename``.

    The signature authorises exactly one PUT of that file name under that id.
    """
    key = (settings.secret_key if secret is None else secret).encode()
    return hmac.new(key, f"{upload_id}:{filename}".encode(), hashlib.sha256).hexdigest()


def verify_upload_signature(
    upload_id: str, filename: str, signature: str, secret: str | None = None
) -> bool:
    return hmac.compare_digest(sign_upload(upload_id, filename, secret), signature)
