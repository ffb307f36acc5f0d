"""
Content versioning façade

Entry points used by the content service after each mutation, and by the
versions API for listing, reading, comparing and restoring versions.

The on_* hooks do not commit. They must be awaited inside the same
ContentUnitOfWork as the mutation they record, after the mutation, so that
the content row and its history are committed or rolled back together.
"""

from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from content_service.database import storage_errors
from content_service.models.content import Content
from content_service.models.content_version import ContentVersion
from content_service.schemas.content_version import VersionComparison
from content_service.services import diff_engine, restore_engine, version_store
from content_service.services.content_repository import ContentRepository
from content_service.services.snapshot_builder import build_snapshot_from_content

INITIAL_CHANGE_NOTE = "Initial creation"
ARCHIVED_CHANGE_NOTE = "Archived"
UNARCHIVED_CHANGE_NOTE = "Restored from archive"


async def _record(content_id: str, change_note: str, actor_id: str | None, db: AsyncSession) -> ContentVersion:
    with storage_errors("flush pending changes"):
        await db.flush()
    snapshot = await build_snapshot_from_content(content_id, db)
    return await version_store.append_snapshot(content_id, snapshot, change_note, actor_id, db)


async def on_create(content_id: str, author_id: str | None, db: AsyncSession) -> ContentVersion:
    """Record version 1 of a freshly created content item."""
    with storage_errors("flush pending changes"):
        await db.flush()
    snapshot = await build_snapshot_from_content(content_id, db)
    return await version_store.create_snapshot(content_id, snapshot, 1, INITIAL_CHANGE_NOTE, author_id, db)


async def on_update(
    content_id: str, updated_by: str | None, change_note: str | None, db: AsyncSession
) -> ContentVersion:
    return await _record(content_id, change_note or "Content updated", updated_by, db)


async def on_archive(content_id: str, archived_by: str | None, db: AsyncSession) -> ContentVersion:
    return await _record(content_id, ARCHIVED_CHANGE_NOTE, archived_by, db)


async def on_unarchive(content_id: str, restored_by: str | None, db: AsyncSession) -> ContentVersion:
    return await _record(content_id, UNARCHIVED_CHANGE_NOTE, restored_by, db)


async def on_tag_change(
    content_id: str,
    actor_id: str | None,
    db: AsyncSession,
    added: Iterable[str] = (),
    removed: Iterable[str] = (),
) -> ContentVersion:
    notes = []
    added, removed = list(added), list(removed)
    if added:
        notes.append(f"Tags added: {', '.join(added)}")
    if removed:
        label = "Tag removed" if len(removed) == 1 else "Tags removed"
        notes.append(f"{label}: {', '.join(removed)}")
    return await _record(content_id, "; ".join(notes) or "Tags changed", actor_id, db)


async def list_versions(
    content_id: str, db: AsyncSession, skip: int = 0, limit: int | None = None
) -> tuple[list[ContentVersion], int]:
    """Newest-first page of versions plus the total number of versions."""
    await ContentRepository(db).get_content(content_id)
    versions = await version_store.get_versions(content_id, db, skip=skip, limit=limit)
    total = await version_store.count_versions(content_id, db)
    return versions, total


async def get_version(content_id: str, version: int, db: AsyncSession) -> ContentVersion:
    return await version_store.get_version(content_id, version, db)


async def get_version_by_id(version_id: str, db: AsyncSession) -> ContentVersion:
    return await version_store.get_version_by_id(version_id, db)


async def restore_version(content_id: str, version_id: str, restored_by: str | None, db: AsyncSession) -> Content:
    await ContentRepository(db).get_content(content_id)
    return await restore_engine.restore_from_version(content_id, version_id, restored_by, db)


async def compare_versions(content_id: str, version_a: int, version_b: int, db: AsyncSession) -> VersionComparison:
    await ContentRepository(db).get_content(content_id)
    return await diff_engine.compare_versions(content_id, version_a, version_b, db)
