import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text

from content_service.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Content(Base):
    __tablename__ = "content"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String, index=True, nullable=False)
    body = Column(Text, nullable=True)
    content_type = Column(String(50), nullable=False)
    resource_url = Column(String, nullable=True)
    hierarchy_id = Column(String(36), nullable=True, index=True)
    is_archived = Column(Boolean, default=False, nullable=False)
    archived_at = Column(DateTime(timezone=True), nullable=True)
    author_id = Column(String, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (Index("idx_content_archived", "is_archived"),)


class ContentMetadata(Base):
    __tablename__ = "content_metadata"

    id = Column(Integer, primary_key=True, index=True)
    content_id = Column(String(36), ForeignKey("content.id", ondelete="CASCADE"), unique=True, nullable=False)
    subject = Column(String, nullable=True)
    topic = Column(String, nullable=True)
    difficulty = Column(String(50), nullable=True)
    # Minutes
    duration = Column(Integer, nullable=True)
    prerequisites = Column(Text, nullable=True)

    FIELDS = ("subject", "topic", "difficulty", "duration", "prerequisites")
