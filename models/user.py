"""
Provides the User and UserSession models.

A session is nothing more than an opaque token pointing at a user; it is
created at sign-in and deleted at sign-out.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from app.shared.clock import utcnow

from .base import Base, BaseModel


class User(BaseModel):
    """
    Represents a registered user.

    :ivar email: Lower-cased email address, unique.
    :type email: str
    :ivar name: Display name.
    :type name: str
    :ivar password_hash: Salted SHA-256 of the password.
    :type password_hash: str
    """

    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(100), nullable=False)
    password_hash = Column(String(128), nullable=False)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")


class UserSession(Base):
    """Opaque session token mapped to a user."""

    __tablename__ = "sessions"

    token = Column(String(64), primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="sessions")
