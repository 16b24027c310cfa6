"""
Defines a base model for SQLAlchemy ORM with common attributes.

Records carry string identifiers generated by the record store (``post_...``,
``comment_...``, room slugs) so that the in-memory and the SQL store hand out
ids of the same shape. Timestamps are stored timezone-aware.
"""

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import declarative_base

from app.shared.clock import utcnow

Base = declarative_base()


class BaseModel(Base):
    """
    Base model class for database entities.

    :ivar id: Unique identifier for the record.
    :type id: str
    :ivar created_at: Timestamp representing when the record was created.
    :type created_at: datetime
    """

    __abstract__ = True

    id = Column(String(64), primary_key=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
