"""
AI sync cursor model.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String

from .base import Base


class AISyncCursor(Base):
    """
    Timestamp of the last confirmed chat-to-post sync for a (room, user) pair.

    A missing row means the user has never synced in that room.
    """

    __tablename__ = "ai_sync_cursors"

    room_id = Column(String(64), ForeignKey("rooms.id"), primary_key=True)
    user_id = Column(String(255), primary_key=True)
    synced_at = Column(DateTime(timezone=True), nullable=False)
