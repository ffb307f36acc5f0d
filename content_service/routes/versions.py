import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from content_service.auth import get_current_user_id
from content_service.config import settings
from content_service.database import get_db
from content_service.schemas.content import ContentDetail
from content_service.schemas.content_version import ContentVersionOut, PaginatedVersions, VersionComparison
from content_service.services import content_service, content_version_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/content/{content_id}/versions", response_model=PaginatedVersions)
async def list_versions(
    content_id: str,
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.versions_page_size, ge=1, le=settings.versions_max_page_size),
    db: AsyncSession = Depends(get_db),
):
    versions, total = await content_version_service.list_versions(content_id, db, skip=skip, limit=limit)
    return PaginatedVersions(
        items=[ContentVersionOut.model_validate(version) for version in versions],
        total=total,
        skip=skip,
        limit=limit,
        has_next=skip + len(versions) < total,
        has_previous=skip > 0,
    )


@router.get("/content/{content_id}/versions/compare", response_model=VersionComparison)
async def compare_versions(
    content_id: str,
    version_a: int = Query(..., ge=1, description="First version number"),
    version_b: int = Query(..., ge=1, description="Second version number"),
    db: AsyncSession = Depends(get_db),
):
    return await content_version_service.compare_versions(content_id, version_a, version_b, db)


@router.get("/content/{content_id}/versions/{version}", response_model=ContentVersionOut)
async def get_version(content_id: str, version: int, db: AsyncSession = Depends(get_db)):
    return await content_version_service.get_version(content_id, version, db)


@router.get("/versions/{version_id}", response_model=ContentVersionOut)
async def get_version_by_id(version_id: str, db: AsyncSession = Depends(get_db)):
    return await content_version_service.get_version_by_id(version_id, db)


@router.post("/content/{content_id}/versions/{version_id}/restore", response_model=ContentDetail)
async def restore_version(
    content_id: str,
    version_id: str,
    db: AsyncSession = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    await content_version_service.restore_version(content_id, version_id, current_user_id, db)
    logger.info(f"User {current_user_id} restored content {content_id} from version {version_id}")
    return await content_service.get_content(content_id, db)
