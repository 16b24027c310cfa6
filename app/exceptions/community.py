"""Room, post and comment exceptions."""

from .base import BaseAppException, NotFoundError, PreconditionFailedError


class RoomNotFoundError(NotFoundError):
    error_code = "ROOM_NOT_FOUND"
    default_message = "Room not found"


class PostNotFoundError(NotFoundError):
    error_code = "POST_NOT_FOUND"
    default_message = "Post not found"


class CommentNotFoundError(NotFoundError):
    error_code = "COMMENT_NOT_FOUND"
    default_message = "Comment not found"


class InvalidCommentOperationError(BaseAppException):
    """Raised when editing or liking a comment that was deleted."""

    status_code = 400
    error_code = "INVALID_COMMENT_OPERATION"
    default_message = "Invalid comment operation"


class NoPostsToAnalyzeError(PreconditionFailedError):
    """Raised when room quality analysis is requested for a room without posts."""

    error_code = "NO_POSTS_TO_ANALYZE"
    default_message = "The room has no posts to analyze"
