"""
Chat message model. Messages are append-only.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text, UniqueConstraint

from .base import BaseModel


class Message(BaseModel):
    """
    Represents a chat message in a room.
    """

    __tablename__ = "messages"
    __table_args__ = (
        UniqueConstraint("room_id", "seq", name="uq_messages_room_seq"),
        Index("ix_messages_room_author_created", "room_id", "author", "created_at"),
    )

    room_id = Column(String(64), ForeignKey("rooms.id"), nullable=False)
    seq = Column(Integer, nullable=False)
    kind = Column(String(20), nullable=False, default="user")  # user, ai, summary, system
    author = Column(String(255), nullable=True)
    text = Column(Text, nullable=True)
