"""
Content service

Lifecycle operations on content items. Every mutation runs in a
ContentUnitOfWork that locks the content row, applies the change and
records the matching version before committing, so the live content and its
history can never drift apart.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from content_service.exceptions import InvalidOperationError, ResourceNotFoundError
from content_service.models.content import Content, ContentMetadata
from content_service.schemas.content import ContentCreate, ContentDetail, ContentUpdate, MetadataOut, TagsAttachResult
from content_service.services import content_version_service
from content_service.services.content_repository import ContentRepository
from content_service.services.unit_of_work import ContentUnitOfWork

logger = logging.getLogger(__name__)

# Fields that may be patched but never cleared
REQUIRED_FIELDS = ("title", "content_type")


def normalize_tag_names(names: Iterable[str]) -> list[str]:
    """Trim and lower-case tag names, dropping blanks and duplicates while keeping order."""
    normalized = []
    for name in names:
        cleaned = name.strip().lower()
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized


def build_change_note(previous_title: str, new_title: str, changed_fields: list[str]) -> str:
    if previous_title != new_title:
        return f'Title changed: "{previous_title}" → "{new_title}"'
    if changed_fields:
        return f"Content updated: {', '.join(changed_fields)}"
    return "Content updated"


async def create_content(data: ContentCreate, author_id: str | None, db: AsyncSession) -> Content:
    """
    Creates a new content item together with its metadata, tags and version 1.

    Args:
        data (ContentCreate): The data for the new content.
        author_id (str | None): The user creating the content.
        db (AsyncSession): The database session.

    Returns:
        Content: The newly created content object.
    """
    async with ContentUnitOfWork(db, operation="content creation") as uow:
        content = Content(
            title=data.title,
            body=data.body,
            content_type=data.content_type,
            resource_url=data.resource_url,
            hierarchy_id=data.hierarchy_id,
            author_id=author_id,
        )
        db.add(content)
        await uow.flush()

        if data.metadata is not None:
            await uow.contents.upsert_metadata(content.id, data.metadata.model_dump(exclude_unset=True))
        tags = normalize_tag_names(data.tags)
        if tags:
            await uow.contents.replace_tags(content.id, tags)

        await content_version_service.on_create(content.id, author_id, db)

    logger.info(f"Content created successfully: {content.id}")
    return content


async def get_content(content_id: str, db: AsyncSession) -> ContentDetail:
    repository = ContentRepository(db)
    content = await repository.get_content(content_id)
    metadata = await repository.get_metadata(content_id)
    tags = await repository.get_tags(content_id)
    return to_content_detail(content, metadata, tags)


def to_content_detail(content: Content, metadata: ContentMetadata | None, tags: Iterable[str]) -> ContentDetail:
    return ContentDetail(
        id=content.id,
        title=content.title,
        body=content.body,
        content_type=content.content_type,
        resource_url=content.resource_url,
        hierarchy_id=content.hierarchy_id,
        is_archived=content.is_archived,
        archived_at=content.archived_at,
        author_id=content.author_id,
        created_at=content.created_at,
        updated_at=content.updated_at,
        metadata=MetadataOut.model_validate(metadata) if metadata is not None else None,
        tags=sorted(tags),
    )


async def update_content(content_id: str, data: ContentUpdate, updated_by: str | None, db: AsyncSession) -> Content:
    async with ContentUnitOfWork(db, operation=f"update of content {content_id}") as uow:
        content = await uow.contents.get_content(content_id, for_update=True)
        previous_title = content.title

        fields = {
            field: value
            for field, value in data.model_dump(exclude_unset=True, exclude={"metadata", "tags", "change_note"}).items()
            if value is not None or field not in REQUIRED_FIELDS
        }
        changed = [field for field, value in fields.items() if getattr(content, field) != value]
        uow.contents.update_content_fields(content, fields)

        if data.metadata is not None:
            await uow.contents.upsert_metadata(content_id, data.metadata.model_dump(exclude_unset=True))
            changed.append("metadata")
        if data.tags is not None:
            await uow.contents.replace_tags(content_id, normalize_tag_names(data.tags))
            changed.append("tags")

        change_note = data.change_note or build_change_note(previous_title, content.title, changed)
        await content_version_service.on_update(content_id, updated_by, change_note, db)

    logger.info(f"Content {content_id} updated by {updated_by}: {change_note}")
    return content


async def archive_content(content_id: str, archived_by: str | None, db: AsyncSession) -> Content:
    async with ContentUnitOfWork(db, operation=f"archive of content {content_id}") as uow:
        content = await uow.contents.get_content(content_id, for_update=True)
        if content.is_archived:
            raise InvalidOperationError("Content is already archived", details={"content_id": content_id})

        uow.contents.update_content_fields(
            content, {"is_archived": True, "archived_at": datetime.now(timezone.utc)}
        )
        await content_version_service.on_archive(content_id, archived_by, db)

    logger.info(f"Content {content_id} archived by {archived_by}")
    return content


async def unarchive_content(content_id: str, restored_by: str | None, db: AsyncSession) -> Content:
    async with ContentUnitOfWork(db, operation=f"unarchive of content {content_id}") as uow:
        content = await uow.contents.get_content(content_id, for_update=True)
        if not content.is_archived:
            raise InvalidOperationError("Content is not archived", details={"content_id": content_id})

        uow.contents.update_content_fields(content, {"is_archived": False, "archived_at": None})
        await content_version_service.on_unarchive(content_id, restored_by, db)

    logger.info(f"Content {content_id} restored from archive by {restored_by}")
    return content


async def attach_tags(
    content_id: str, tag_names: Iterable[str], actor_id: str | None, db: AsyncSession
) -> TagsAttachResult:
    """Attach tags, creating unknown ones. Already attached names are reported as skipped."""
    names = normalize_tag_names(tag_names)
    async with ContentUnitOfWork(db, operation=f"tagging of content {content_id}") as uow:
        await uow.contents.get_content(content_id, for_update=True)
        attached = await uow.contents.add_tags(content_id, names)
        if attached:
            await content_version_service.on_tag_change(content_id, actor_id, db, added=attached)

    return TagsAttachResult(attached=attached, skipped=[name for name in names if name not in attached])


async def detach_tag(content_id: str, tag_name: str, actor_id: str | None, db: AsyncSession) -> None:
    name = tag_name.strip().lower()
    async with ContentUnitOfWork(db, operation=f"untagging of content {content_id}") as uow:
        await uow.contents.get_content(content_id, for_update=True)
        if not await uow.contents.remove_tag(content_id, name):
            raise ResourceNotFoundError(
                "Tag", name, message=f'Tag "{name}" is not attached to content \'{content_id}\''
            )
        await content_version_service.on_tag_change(content_id, actor_id, db, removed=[name])

    logger.info(f"Tag {name} removed from content {content_id} by {actor_id}")
