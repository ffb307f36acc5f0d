from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MetadataIn(BaseModel):
    subject: Optional[str] = Field(None, title="Subject")
    topic: Optional[str] = Field(None, title="Topic")
    difficulty: Optional[str] = Field(None, title="Difficulty", description="e.g. beginner, intermediate, advanced")
    duration: Optional[int] = Field(None, ge=0, title="Duration", description="Estimated duration in minutes.")
    prerequisites: Optional[str] = Field(None, title="Prerequisites")


class ContentCreate(BaseModel):
    title: str = Field(..., min_length=1, title="Content Title", description="The title of the content.")
    body: Optional[str] = Field(None, title="Content Body", description="The main body of the content.")
    content_type: str = Field(..., min_length=1, title="Content Type", description="e.g. article, video, document.")
    resource_url: Optional[str] = Field(None, title="Resource URL", description="Location of an attached resource.")
    hierarchy_id: Optional[str] = Field(None, title="Hierarchy ID", description="Node of the content hierarchy.")
    metadata: Optional[MetadataIn] = Field(None, title="Metadata")
    tags: List[str] = Field(default_factory=list, title="Tags")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Introduction to Fractions",
                "body": "A fraction represents a part of a whole.",
                "content_type": "article",
                "metadata": {"subject": "math", "topic": "fractions", "difficulty": "beginner", "duration": 15},
                "tags": ["math", "grade-4"],
            }
        }
    )


class ContentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, title="Updated Title")
    body: Optional[str] = Field(None, title="Updated Body")
    content_type: Optional[str] = Field(None, min_length=1, title="Updated Content Type")
    resource_url: Optional[str] = Field(None, title="Updated Resource URL")
    hierarchy_id: Optional[str] = Field(None, title="Updated Hierarchy ID")
    metadata: Optional[MetadataIn] = Field(None, title="Metadata", description="Merged into the existing record.")
    tags: Optional[List[str]] = Field(None, title="Tags", description="Replaces all tags when provided.")
    change_note: Optional[str] = Field(None, title="Change Note", description="Overrides the generated note.")


class MetadataOut(BaseModel):
    subject: Optional[str] = None
    topic: Optional[str] = None
    difficulty: Optional[str] = None
    duration: Optional[int] = None
    prerequisites: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ContentDetail(BaseModel):
    id: str
    title: str
    body: Optional[str]
    content_type: str
    resource_url: Optional[str]
    hierarchy_id: Optional[str]
    is_archived: bool
    archived_at: Optional[datetime]
    author_id: Optional[str]
    created_at: datetime
    updated_at: datetime
    metadata: Optional[MetadataOut] = None
    tags: List[str] = []


class TagsAttach(BaseModel):
    tags: List[str] = Field(..., min_length=1, title="Tag names")


class TagsAttachResult(BaseModel):
    attached: List[str]
    skipped: List[str]
