"""
Room and room category preset models.
"""

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import Base, BaseModel


class Room(BaseModel):
    """
    A chat room.

    ``last_seq`` is the per-room message counter; it is only ever advanced by
    a single ``UPDATE ... RETURNING`` so that two messages never share a
    sequence number.
    """

    __tablename__ = "rooms"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    rules = Column(Text, nullable=True)
    visibility = Column(String(20), nullable=False, default="public")  # public, private, invite
    starred = Column(Boolean, nullable=False, default=False)
    last_seq = Column(Integer, nullable=False, default=0)

    categories = relationship("RoomCategory", back_populates="room", cascade="all, delete-orphan")


class RoomCategory(Base):
    """Free-text post prefix preset for a room."""

    __tablename__ = "room_categories"

    room_id = Column(String(64), ForeignKey("rooms.id"), primary_key=True)
    name = Column(String(100), primary_key=True)
    position = Column(Integer, nullable=False, default=0)

    room = relationship("Room", back_populates="categories")
