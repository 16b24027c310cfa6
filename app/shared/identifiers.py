"""Identifier generation for records."""

import re
import uuid

_SLUG_STRIP = re.compile(r"[^\w\s-]", re.UNICODE)
_SLUG_SPACES = re.compile(r"[\s_]+")


def new_id(prefix: str, length: int = 12) -> str:
    """Return ``<prefix>_<hex>`` with ``length`` random hex characters."""
    return f"{prefix}_{uuid.uuid4().hex[:length]}"


def slugify(value: str) -> str:
    """Lower-case slug of ``value``; keeps unicode letters, max 32 chars."""
    base = _SLUG_STRIP.sub("", value.lower()).strip()
    base = _SLUG_SPACES.sub("-", base)[:32].strip("-")
    return base or "room"


def new_room_id(name: str) -> str:
    """Room ids are a slug of the name plus 8 random hex characters."""
    return f"{slugify(name)}-{uuid.uuid4().hex[:8]}"


def resolve_author(requested: str | None, signed_in_id: str | None) -> str | None:
    """One identity rule for every write: a session beats the name in the body.

    Anonymous callers may name themselves; blank names count as missing.
    """
    if signed_in_id:
        return signed_in_id
    return (requested or "").strip() or None
