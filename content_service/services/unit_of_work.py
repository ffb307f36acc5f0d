import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from content_service.exceptions import StorageError
from content_service.models.content_version import ContentVersion
from content_service.schemas.content_version import ContentSnapshot
from content_service.services import version_store
from content_service.services.content_repository import ContentRepository

logger = logging.getLogger(__name__)


class ContentUnitOfWork:
    """
    One transaction over a single content item.

    Groups the writes to the content row, its metadata, its tag associations
    and its version log. Leaving the block normally commits all of them;
    leaving it with any exception, cancellation included, rolls all of them
    back.

    Usage:
        async with ContentUnitOfWork(db) as uow:
            content = await uow.contents.get_content(content_id, for_update=True)
            uow.contents.update_content_fields(content, {"title": snapshot.title})
            await uow.record_version(content_id, snapshot, "Restored from version 1", user_id)
    """

    def __init__(self, db: AsyncSession, operation: str = "content transaction"):
        self.db = db
        self.operation = operation
        self.contents = ContentRepository(db)

    async def __aenter__(self) -> "ContentUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            logger.info(f"Rolling back {self.operation}: {exc_type.__name__}")
            await self.db.rollback()
            return False

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Commit failed for {self.operation}: {e}")
            await self.db.rollback()
            raise StorageError(f"Failed to commit {self.operation}", operation=self.operation) from e
        return False

    async def flush(self) -> None:
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write {self.operation}", operation=self.operation) from e

    async def record_version(
        self,
        content_id: str,
        snapshot: ContentSnapshot,
        change_note: str | None,
        created_by: str | None,
    ) -> ContentVersion:
        """Append a version for the snapshot inside this transaction."""
        await self.flush()
        return await version_store.append_snapshot(content_id, snapshot, change_note, created_by, self.db)
