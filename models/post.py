"""
Community post and comment models.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import backref, relationship

from .base import BaseModel


class Post(BaseModel):
    """
    A post in a room. ``comment_count`` is denormalised and counts
    non-deleted comments only.
    """

    __tablename__ = "posts"
    __table_args__ = (Index("ix_posts_room_created", "room_id", "created_at"),)

    room_id = Column(String(64), ForeignKey("rooms.id"), nullable=False)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    author = Column(String(255), nullable=True)
    views = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)
    comment_count = Column(Integer, nullable=False, default=0)

    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan")


class Comment(BaseModel):
    """
    A comment on a post. Deleting only sets ``is_deleted``; replies stay
    addressable through ``parent_id``.
    """

    __tablename__ = "comments"

    post_id = Column(String(64), ForeignKey("posts.id"), nullable=False)
    room_id = Column(String(64), ForeignKey("rooms.id"), nullable=False)
    parent_id = Column(String(64), ForeignKey("comments.id"), nullable=True)
    content = Column(Text, nullable=False)
    author = Column(String(255), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)
    likes = Column(Integer, nullable=False, default=0)
    is_deleted = Column(Boolean, nullable=False, default=False)

    post = relationship("Post", back_populates="comments")
    replies = relationship(
        "Comment",
        backref=backref("parent", remote_side="Comment.id"),
        foreign_keys=[parent_id],
    )
