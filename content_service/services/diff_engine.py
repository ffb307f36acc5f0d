from sqlalchemy.ext.asyncio import AsyncSession

from content_service.schemas.content_version import ContentSnapshot, FieldChange, VersionComparison, VersionRef
from content_service.services import version_store
from content_service.services.content_repository import RESTORABLE_FIELDS


def diff_snapshots(a: ContentSnapshot, b: ContentSnapshot) -> dict[str, FieldChange]:
    """
    Field-by-field comparison of two snapshots.

    Scalar fields are reported individually. Metadata is compared as one
    unit and reported whole. Tags are compared as sets and reported as the
    full sorted tag lists of both sides.
    """
    changes: dict[str, FieldChange] = {}

    for field in RESTORABLE_FIELDS:
        before, after = getattr(a, field), getattr(b, field)
        if before != after:
            changes[field] = FieldChange(from_=before, to=after)

    if a.metadata != b.metadata:
        changes["metadata"] = FieldChange(
            from_=a.metadata.model_dump() if a.metadata else None,
            to=b.metadata.model_dump() if b.metadata else None,
        )

    if a.tags != b.tags:
        changes["tags"] = FieldChange(from_=sorted(a.tags), to=sorted(b.tags))

    return changes


async def compare_versions(content_id: str, version_a: int, version_b: int, db: AsyncSession) -> VersionComparison:
    """Diff two versions of one content item; either may be the older one."""
    ver_a = await version_store.get_version(content_id, version_a, db)
    ver_b = await version_store.get_version(content_id, version_b, db)

    changes = diff_snapshots(
        ContentSnapshot.from_storage(ver_a.snapshot),
        ContentSnapshot.from_storage(ver_b.snapshot),
    )
    return VersionComparison(
        version_a=VersionRef(version=ver_a.version, created_at=ver_a.created_at),
        version_b=VersionRef(version=ver_b.version, created_at=ver_b.created_at),
        changes=changes,
        has_changes=bool(changes),
    )
