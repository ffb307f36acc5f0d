"""
Content repository

Narrow read/write interface over the content tables used by the versioning
subsystem. Reads are used by the snapshot builder; the write methods are
only called from inside a ContentUnitOfWork so they share one transaction.
"""

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import delete, insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from content_service.database import storage_errors
from content_service.exceptions import ContentNotFoundError, InvalidArgumentError
from content_service.models.content import Content, ContentMetadata
from content_service.models.content_tags import content_tags
from content_service.models.tag import Tag

logger = logging.getLogger(__name__)

RESTORABLE_FIELDS = ("title", "body", "content_type", "resource_url", "hierarchy_id")


class ContentRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_content(self, content_id: str, for_update: bool = False) -> Content:
        """
        Load a content row.

        Args:
            content_id: The content identifier
            for_update: Take a row lock until the surrounding transaction ends

        Raises:
            ContentNotFoundError: If the content does not exist
        """
        query = select(Content).where(Content.id == content_id)
        if for_update:
            # Overwrite the identity-map copy with the locked row
            query = query.with_for_update().execution_options(populate_existing=True)
        with storage_errors("get_content"):
            result = await self.db.execute(query)
            content = result.scalars().first()
        if content is None:
            raise ContentNotFoundError(content_id)
        return content

    async def get_metadata(self, content_id: str) -> ContentMetadata | None:
        with storage_errors("get_metadata"):
            result = await self.db.execute(select(ContentMetadata).where(ContentMetadata.content_id == content_id))
            return result.scalars().first()

    async def get_tags(self, content_id: str) -> set[str]:
        with storage_errors("get_tags"):
            result = await self.db.execute(
                select(Tag.name).join(content_tags, content_tags.c.tag_id == Tag.id).where(
                    content_tags.c.content_id == content_id
                )
            )
            return set(result.scalars().all())

    def update_content_fields(self, content: Content, fields: dict[str, Any]) -> None:
        for field, value in fields.items():
            setattr(content, field, value)

    async def upsert_metadata(self, content_id: str, fields: dict[str, Any]) -> ContentMetadata:
        """Create the metadata record, or overwrite the given fields of the existing one."""
        unknown = sorted(set(fields) - set(ContentMetadata.FIELDS))
        if unknown:
            raise InvalidArgumentError(
                f"Unknown metadata field: {', '.join(unknown)}", details={"fields": unknown}
            )

        metadata = await self.get_metadata(content_id)
        if metadata is None:
            metadata = ContentMetadata(content_id=content_id)
            self.db.add(metadata)
        for field, value in fields.items():
            setattr(metadata, field, value)
        with storage_errors("upsert_metadata"):
            await self.db.flush()
        return metadata

    async def get_or_create_tag(self, name: str) -> Tag:
        with storage_errors("get_or_create_tag"):
            result = await self.db.execute(select(Tag).where(Tag.name == name))
            tag = result.scalars().first()
            if tag is None:
                tag = Tag(name=name)
                self.db.add(tag)
                await self.db.flush()
        return tag

    async def replace_tags(self, content_id: str, tag_names: Iterable[str]) -> None:
        """Drop every tag association of the content and link exactly the given names."""
        with storage_errors("replace_tags"):
            await self.db.execute(delete(content_tags).where(content_tags.c.content_id == content_id))
        for name in sorted(set(tag_names)):
            tag = await self.get_or_create_tag(name)
            with storage_errors("replace_tags"):
                await self.db.execute(insert(content_tags).values(content_id=content_id, tag_id=tag.id))

    async def add_tags(self, content_id: str, tag_names: Iterable[str]) -> list[str]:
        """Link the given tags, returning the names that were not already attached."""
        existing = await self.get_tags(content_id)
        added = []
        for name in tag_names:
            if name in existing or name in added:
                continue
            tag = await self.get_or_create_tag(name)
            with storage_errors("add_tags"):
                await self.db.execute(insert(content_tags).values(content_id=content_id, tag_id=tag.id))
            added.append(name)
        return added

    async def remove_tag(self, content_id: str, tag_name: str) -> bool:
        with storage_errors("remove_tag"):
            result = await self.db.execute(select(Tag.id).where(Tag.name == tag_name))
            tag_id = result.scalars().first()
            if tag_id is None:
                return False
            result = await self.db.execute(
                delete(content_tags).where(content_tags.c.content_id == content_id, content_tags.c.tag_id == tag_id)
            )
            return result.rowcount > 0
