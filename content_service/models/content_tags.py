from sqlalchemy import Table, Column, Integer, String, ForeignKey
from content_service.database import Base

content_tags = Table(
    "content_tags",
    Base.metadata,
    Column("content_id", String(36), ForeignKey("content.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)
)
