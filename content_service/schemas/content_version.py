from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class MetadataSnapshot(BaseModel):
    """Captured copy of a content item's metadata record."""

    model_config = ConfigDict(frozen=True)

    subject: str | None = None
    topic: str | None = None
    difficulty: str | None = None
    duration: int | None = None
    prerequisites: str | None = None


class ContentSnapshot(BaseModel):
    """
    Everything restorable about a content item at one point in time.

    Snapshots are immutable and compare structurally. Tags form a set, so two
    snapshots that differ only in tag order are equal. Archival state is
    deliberately not captured.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    body: str | None = None
    content_type: str
    resource_url: str | None = None
    hierarchy_id: str | None = None
    metadata: MetadataSnapshot | None = None
    tags: frozenset[str] = frozenset()

    @field_serializer("tags")
    def _serialize_tags(self, tags: frozenset[str]) -> list[str]:
        return sorted(tags)

    def to_storage(self) -> dict[str, Any]:
        """Serialize to the JSON document stored in content_versions.snapshot."""
        return self.model_dump(mode="json")

    @classmethod
    def from_storage(cls, data: dict[str, Any]) -> "ContentSnapshot":
        return cls.model_validate(data)


class ContentVersionOut(BaseModel):
    id: str
    content_id: str
    version: int
    snapshot: ContentSnapshot
    change_note: str | None
    created_by: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaginatedVersions(BaseModel):
    """Newest-first page of a content item's history"""

    items: list[ContentVersionOut]
    total: int
    skip: int
    limit: int
    has_next: bool
    has_previous: bool


class VersionRef(BaseModel):
    version: int
    created_at: datetime


class FieldChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: Any = Field(alias="from")
    to: Any


class VersionComparison(BaseModel):
    version_a: VersionRef
    version_b: VersionRef
    changes: dict[str, FieldChange]
    has_changes: bool

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "version_a": {"version": 1, "created_at": "2026-01-10T09:00:00Z"},
                "version_b": {"version": 2, "created_at": "2026-01-11T14:30:00Z"},
                "changes": {
                    "title": {"from": "A", "to": "B"},
                    "tags": {"from": [], "to": ["x"]},
                },
                "has_changes": True,
            }
        }
    )
