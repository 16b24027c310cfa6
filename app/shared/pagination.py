"""Pagination utilities."""

from pydantic import BaseModel, Field

MAX_PAGE_LIMIT = 200


def clamp_limit(limit: int | None, default: int, maximum: int = MAX_PAGE_LIMIT) -> int:
    """Clamp a requested page size into ``1..maximum``."""
    if limit is None:
        return default
    return max(1, min(maximum, limit))


class CursorParams(BaseModel):
    """Sequence-cursor pagination parameters.

    Without a cursor the latest ``limit`` items are returned; with a cursor the
    first ``limit`` items whose sequence number is greater than it.
    """

    cursor: int | None = Field(default=None, ge=0, description="Last sequence number seen")
    limit: int = Field(default=50, ge=1, le=MAX_PAGE_LIMIT, description="Page size")


def next_cursor(sequences: list[int], cursor: int | None) -> int | None:
    """Cursor to send back: the last sequence returned, or the request cursor."""
    if sequences:
        return sequences[-1]
    return cursor
