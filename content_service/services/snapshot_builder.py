import logging

from sqlalchemy.ext.asyncio import AsyncSession

from content_service.models.content import ContentMetadata
from content_service.schemas.content_version import ContentSnapshot, MetadataSnapshot
from content_service.services.content_repository import RESTORABLE_FIELDS, ContentRepository

logger = logging.getLogger(__name__)


async def build_snapshot_from_content(content_id: str, db: AsyncSession) -> ContentSnapshot:
    """
    Capture the current state of a content item.

    Reads the content row, its metadata record and its tag names. The caller
    is responsible for flushing any pending write first, so the snapshot
    reflects the state after that write.

    Raises:
        ContentNotFoundError: If the content no longer exists
    """
    repository = ContentRepository(db)
    content = await repository.get_content(content_id)
    metadata = await repository.get_metadata(content_id)
    tags = await repository.get_tags(content_id)
    logger.debug(f"Built snapshot of content {content_id} with {len(tags)} tags")

    return ContentSnapshot(
        **{field: getattr(content, field) for field in RESTORABLE_FIELDS},
        metadata=_metadata_snapshot(metadata),
        tags=frozenset(tags),
    )


def _metadata_snapshot(metadata: ContentMetadata | None) -> MetadataSnapshot | None:
    if metadata is None:
        return None
    return MetadataSnapshot(**{field: getattr(metadata, field) for field in ContentMetadata.FIELDS})
