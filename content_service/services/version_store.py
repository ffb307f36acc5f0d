"""
Version store and sequencer

Append-only log of content snapshots keyed by (content_id, version). Version
numbers are computed as max(version) + 1 and protected by the unique
constraint on (content_id, version): an insert that loses a race is rolled
back to its savepoint and retried with a freshly computed number.
"""

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from content_service.config import settings
from content_service.database import storage_errors
from content_service.exceptions import InvalidArgumentError, StorageError, VersionConflictError, VersionNotFoundError
from content_service.models.content_version import ContentVersion
from content_service.schemas.content_version import ContentSnapshot

logger = logging.getLogger(__name__)


async def get_next_version(content_id: str, db: AsyncSession) -> int:
    """Return the number the next version of this content will get, starting at 1."""
    with storage_errors("get_next_version"):
        result = await db.execute(
            select(func.max(ContentVersion.version)).where(ContentVersion.content_id == content_id)
        )
        current = result.scalar()
    return (current or 0) + 1


async def create_snapshot(
    content_id: str,
    snapshot: ContentSnapshot,
    version: int,
    change_note: str | None,
    created_by: str | None,
    db: AsyncSession,
) -> ContentVersion:
    """
    Insert one immutable version row.

    The insert runs inside a SAVEPOINT so that a uniqueness violation leaves
    the surrounding transaction usable.

    Raises:
        VersionConflictError: If (content_id, version) already exists
        StorageError: On any other persistence failure
    """
    if version < 1:
        raise InvalidArgumentError("Version numbers start at 1", details={"version": version})

    row = ContentVersion(
        content_id=content_id,
        version=version,
        snapshot=snapshot.to_storage(),
        change_note=change_note or None,
        created_by=created_by or None,
    )
    try:
        async with db.begin_nested():
            db.add(row)
    except IntegrityError as e:
        logger.warning(
            f"Version {version} of content {content_id} already exists",
            extra={"content_id": content_id, "version": version},
        )
        raise VersionConflictError(content_id, version) from e
    except SQLAlchemyError as e:
        logger.error(f"Create snapshot error for content {content_id}: {e}")
        raise StorageError("Cannot create version snapshot", operation="create_snapshot") from e

    logger.info(
        f"Recorded version {version} of content {content_id}",
        extra={"content_id": content_id, "version": version, "actor_id": created_by},
    )
    return row


async def append_snapshot(
    content_id: str,
    snapshot: ContentSnapshot,
    change_note: str | None,
    created_by: str | None,
    db: AsyncSession,
    max_attempts: int | None = None,
) -> ContentVersion:
    """
    Allocate the next version number and insert the snapshot under it.

    Retries with a recomputed number when a concurrent writer took the
    number first.

    Raises:
        VersionConflictError: If every attempt lost the race
    """
    attempts = max_attempts or settings.version_conflict_retries
    for attempt in range(1, attempts + 1):
        version = await get_next_version(content_id, db)
        try:
            return await create_snapshot(content_id, snapshot, version, change_note, created_by, db)
        except VersionConflictError:
            if attempt == attempts:
                logger.error(f"Giving up on content {content_id} after {attempts} version conflicts")
                raise VersionConflictError(content_id, version, attempts=attempts)
            logger.warning(f"Retrying version allocation for content {content_id} (attempt {attempt + 1}/{attempts})")
    # max_attempts < 1
    raise InvalidArgumentError("At least one attempt is required", details={"max_attempts": attempts})


async def get_versions(
    content_id: str, db: AsyncSession, skip: int = 0, limit: int | None = None
) -> list[ContentVersion]:
    query = (
        select(ContentVersion)
        .where(ContentVersion.content_id == content_id)
        .order_by(ContentVersion.version.desc())
        .offset(skip)
    )
    if limit is not None:
        query = query.limit(limit)
    with storage_errors("get_versions"):
        result = await db.execute(query)
        return list(result.scalars().all())


async def count_versions(content_id: str, db: AsyncSession) -> int:
    with storage_errors("count_versions"):
        result = await db.execute(
            select(func.count(ContentVersion.id)).where(ContentVersion.content_id == content_id)
        )
        return result.scalar_one()


async def get_version(content_id: str, version: int, db: AsyncSession) -> ContentVersion:
    with storage_errors("get_version"):
        result = await db.execute(
            select(ContentVersion).where(ContentVersion.content_id == content_id, ContentVersion.version == version)
        )
        row = result.scalars().first()
    if row is None:
        raise VersionNotFoundError(content_id=content_id, version=version)
    return row


async def get_version_by_id(version_id: str, db: AsyncSession) -> ContentVersion:
    with storage_errors("get_version_by_id"):
        result = await db.execute(select(ContentVersion).where(ContentVersion.id == version_id))
        row = result.scalars().first()
    if row is None:
        raise VersionNotFoundError(version_id)
    return row
