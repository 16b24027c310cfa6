"""
Models package initialization.
"""

from .ai_sync import AISyncCursor
from .base import Base, BaseModel
from .message import Message
from .post import Comment, Post
from .room import Room, RoomCategory
from .user import User, UserSession

__all__ = [
    "Base",
    "BaseModel",
    "User",
    "UserSession",
    "Room",
    "RoomCategory",
    "Message",
    "Post",
    "Comment",
    "AISyncCursor",
]
