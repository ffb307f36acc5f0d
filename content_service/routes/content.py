from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from content_service.auth import get_current_user_id
from content_service.database import get_db
from content_service.schemas.content import ContentCreate, ContentDetail, ContentUpdate, TagsAttach, TagsAttachResult
from content_service.services import content_service

router = APIRouter()


@router.post("/content", response_model=ContentDetail, status_code=status.HTTP_201_CREATED)
async def create_content(
    content: ContentCreate,
    db: AsyncSession = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    new_content = await content_service.create_content(content, current_user_id, db)
    return await content_service.get_content(new_content.id, db)


@router.get("/content/{content_id}", response_model=ContentDetail)
async def get_content(content_id: str, db: AsyncSession = Depends(get_db)):
    return await content_service.get_content(content_id, db)


@router.patch("/content/{content_id}", response_model=ContentDetail)
async def update_content(
    content_id: str,
    content: ContentUpdate,
    db: AsyncSession = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    await content_service.update_content(content_id, content, current_user_id, db)
    return await content_service.get_content(content_id, db)


@router.post("/content/{content_id}/archive", response_model=ContentDetail)
async def archive_content(
    content_id: str,
    db: AsyncSession = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    await content_service.archive_content(content_id, current_user_id, db)
    return await content_service.get_content(content_id, db)


@router.post("/content/{content_id}/unarchive", response_model=ContentDetail)
async def unarchive_content(
    content_id: str,
    db: AsyncSession = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    await content_service.unarchive_content(content_id, current_user_id, db)
    return await content_service.get_content(content_id, db)


@router.post("/content/{content_id}/tags", response_model=TagsAttachResult)
async def attach_tags(
    content_id: str,
    payload: TagsAttach,
    db: AsyncSession = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    return await content_service.attach_tags(content_id, payload.tags, current_user_id, db)


@router.delete("/content/{content_id}/tags/{tag_name}", status_code=status.HTTP_204_NO_CONTENT)
async def detach_tag(
    content_id: str,
    tag_name: str,
    db: AsyncSession = Depends(get_db),
    current_user_id: str = Depends(get_current_user_id),
):
    await content_service.detach_tag(content_id, tag_name, current_user_id, db)
