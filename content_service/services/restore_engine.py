import logging

from sqlalchemy.ext.asyncio import AsyncSession

from content_service.exceptions import InvalidArgumentError, StorageError
from content_service.models.content import Content
from content_service.schemas.content_version import ContentSnapshot
from content_service.services import version_store
from content_service.services.content_repository import RESTORABLE_FIELDS
from content_service.services.unit_of_work import ContentUnitOfWork

logger = logging.getLogger(__name__)


async def restore_from_version(
    content_id: str, version_id: str, restored_by: str | None, db: AsyncSession
) -> Content:
    """
    Bring a content item back to the state captured in one of its versions.

    In a single transaction the content fields are overwritten from the
    snapshot, archival state is cleared, metadata is upserted (left alone when
    the snapshot has none), tag associations are replaced, and a new version
    recording the restore is appended. Nothing is written if any step fails.

    Args:
        content_id: The content to restore
        version_id: Id of the version to restore from
        restored_by: Actor recorded on the new version
        db: Database session

    Returns:
        Content: The restored content row

    Raises:
        VersionNotFoundError: If the version does not exist
        InvalidArgumentError: If the version belongs to another content item
        ContentNotFoundError: If the content does not exist
        StorageError: If the transaction could not be written
    """
    try:
        async with ContentUnitOfWork(db, operation=f"restore of content {content_id}") as uow:
            target = await version_store.get_version_by_id(version_id, db)
            if target.content_id != content_id:
                raise InvalidArgumentError(
                    "Version does not belong to this content",
                    details={"content_id": content_id, "version_id": version_id},
                )
            snapshot = ContentSnapshot.from_storage(target.snapshot)

            content = await uow.contents.get_content(content_id, for_update=True)
            apply_snapshot(uow, content, snapshot)
            if snapshot.metadata is not None:
                await uow.contents.upsert_metadata(content_id, snapshot.metadata.model_dump())
            await uow.contents.replace_tags(content_id, snapshot.tags)

            new_version = await uow.record_version(
                content_id, snapshot, f"Restored from version {target.version}", restored_by
            )
    except StorageError as e:
        raise StorageError(
            f"Restore of content '{content_id}' failed; content was not changed",
            operation=e.details.get("operation", "restore"),
        ) from e

    logger.info(
        f"Content {content_id} restored from version {target.version} as version {new_version.version} "
        f"by {restored_by}",
        extra={"content_id": content_id, "version": new_version.version, "actor_id": restored_by},
    )
    return content


def apply_snapshot(uow: ContentUnitOfWork, content: Content, snapshot: ContentSnapshot) -> None:
    """Overwrite the restorable fields of the content row and clear its archival state."""
    fields = {field: getattr(snapshot, field) for field in RESTORABLE_FIELDS}
    fields.update(is_archived=False, archived_at=None)
    uow.contents.update_content_fields(content, fields)
