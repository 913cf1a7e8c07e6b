"""
TourStack Backend — Media Library Routes
==========================================

What:  /api/media: multipart uploads, listing, metadata and tag edits,
       usage lookup, deletion and the disk-to-database sync.

Fixed paths (/sync, /upload, /bulk, /bulk/tags) are declared before the
/{media_id} routes so they are never read as ids.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from tourstack.database import get_db_session
from tourstack.exceptions import ValidationError
from tourstack.schemas.common import ErrorResponse, SuccessResponse
from tourstack.schemas.media import (
    BulkDeleteRequest,
    BulkTagsRequest,
    MediaResponse,
    MediaUpdate,
    MediaUsageResponse,
    SyncResult,
    UploadResult,
)
from tourstack.services.media_service import MediaService, media_service

router = APIRouter(prefix="/api/media", tags=["Media"])


def get_media_service() -> MediaService:
    return media_service


async def _read_upload(file: Optional[UploadFile]):
    if file is None:
        raise ValidationError(message="No file uploaded", field="file")
    content = await file.read()
    return file.filename or "upload", content, file.content_type or "application/octet-stream"


@router.get("", response_model=List[MediaResponse], summary="List media, newest first")
async def list_media(
    db: AsyncSession = Depends(get_db_session),
    service: MediaService = Depends(get_media_service),
) -> List[MediaResponse]:
    return await service.list_media(db)


@router.post(
    "",
    response_model=MediaResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Upload a file into the media library",
)
async def upload_media(
    file: Optional[UploadFile] = File(default=None, description="Image, audio, video or PDF"),
    alt: Optional[str] = Form(default=None),
    caption: Optional[str] = Form(default=None),
    tags: Optional[str] = Form(default=None, description='JSON array, e.g. ["sculpture"]'),
    width: Optional[str] = Form(default=None),
    height: Optional[str] = Form(default=None),
    duration: Optional[str] = Form(default=None),
    db: AsyncSession = Depends(get_db_session),
    service: MediaService = Depends(get_media_service),
) -> MediaResponse:
    filename, content, mime_type = await _read_upload(file)
    return await service.create_media(
        db,
        filename=filename,
        content=content,
        mime_type=mime_type,
        alt=alt,
        caption=caption,
        tags=tags,
        width=width,
        height=height,
        duration=duration,
    )


@router.post(
    "/upload",
    response_model=UploadResult,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Store a file and return its URL (no library entry)",
)
async def quick_upload(
    file: Optional[UploadFile] = File(default=None),
    service: MediaService = Depends(get_media_service),
) -> UploadResult:
    filename, content, mime_type = await _read_upload(file)
    return await service.quick_upload(filename, content, mime_type)


@router.post("/sync", response_model=SyncResult, summary="Register files on disk that have no library entry")
async def sync_media(
    db: AsyncSession = Depends(get_db_session),
    service: MediaService = Depends(get_media_service),
) -> SyncResult:
    return await service.sync(db)


@router.delete(
    "/bulk",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}},
    summary="Delete several media items",
)
async def bulk_delete(
    body: BulkDeleteRequest,
    db: AsyncSession = Depends(get_db_session),
    service: MediaService = Depends(get_media_service),
) -> Response:
    await service.bulk_delete(db, body.ids)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/bulk/tags",
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Add or replace tags on several media items",
)
async def bulk_tags(
    body: BulkTagsRequest,
    db: AsyncSession = Depends(get_db_session),
    service: MediaService = Depends(get_media_service),
) -> SuccessResponse:
    await service.bulk_tags(db, body)
    return SuccessResponse()


@router.get(
    "/{media_id}",
    response_model=MediaResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get one media item",
)
async def get_media(
    media_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: MediaService = Depends(get_media_service),
) -> MediaResponse:
    return await service.get_media(db, media_id)


@router.put(
    "/{media_id}",
    response_model=MediaResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Update alt text, caption or tags",
)
async def update_media(
    media_id: str,
    body: MediaUpdate,
    db: AsyncSession = Depends(get_db_session),
    service: MediaService = Depends(get_media_service),
) -> MediaResponse:
    return await service.update_media(db, media_id, body)


@router.get(
    "/{media_id}/usage",
    response_model=MediaUsageResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Tours and stops that reference this file",
)
async def media_usage(
    media_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: MediaService = Depends(get_media_service),
) -> MediaUsageResponse:
    return await service.usage(db, media_id)


@router.delete(
    "/{media_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a media item and its file",
)
async def delete_media(
    media_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: MediaService = Depends(get_media_service),
) -> Response:
    await service.delete_media(db, media_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
