"""
TourStack Backend — Media Library Service
===========================================

What:  Upload, list, tag, delete and audit files in the media library.
Why:   Images and audio used by tours and stops are managed in one place so
       the editor can show where each file is used before it is deleted.
How:   Bytes go through FileService (validation + disk); metadata goes into
       the `media` table. A write that succeeds on disk but fails in the
       database removes the file again.
Who:   /api/media routes.

Flow (POST /api/media):
    1. Route reads the multipart file into memory
    2. FileService validates MIME type and size, writes uploads/<category>/<uuid><ext>
    3. Media row recorded with the original filename and optional metadata
    4. Row returned (201)
"""

import json
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourstack.exceptions import DatabaseError, NotFoundError, TourStackError, ValidationError
from tourstack.models.media import Media
from tourstack.models.stop import Stop
from tourstack.models.tour import Tour
from tourstack.schemas.media import (
    BulkTagsRequest,
    MediaResponse,
    MediaUpdate,
    MediaUsageResponse,
    StopUsage,
    SyncResult,
    TourUsage,
    UploadResult,
)
from tourstack.services.file_service import FileService, file_service

logger = logging.getLogger(__name__)


def _parse_number(value: Optional[str], cast: Any, field: str) -> Optional[Any]:
    """Form fields arrive as text; empty means absent."""
    if value is None or value == "":
        return None
    try:
        return cast(value)
    except ValueError as e:
        raise ValidationError(message=f"Invalid {field}", field=field, context={"value": value}) from e


def _parse_tags(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    try:
        tags = json.loads(value)
    except ValueError as e:
        raise ValidationError(message="Invalid tags", field="tags", context={"value": value}) from e
    if not isinstance(tags, list):
        raise ValidationError(message="Invalid tags", field="tags", context={"value": value})
    return tags


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


class MediaService:
    """
    Media library operations.

    Args:
        files: FileService to store and remove bytes (tests pass one rooted
               in a temporary directory).
    """

    def __init__(self, files: Optional[FileService] = None):
        self.files = files or file_service

    async def _get(self, db: AsyncSession, media_id: str) -> Media:
        media = await db.get(Media, media_id)
        if media is None:
            raise NotFoundError(resource="Media", resource_id=media_id)
        return media

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_media(self, db: AsyncSession) -> List[MediaResponse]:
        """Newest first."""
        try:
            result = await db.execute(select(Media).order_by(Media.created_at.desc()))
            items = result.scalars().all()
        except Exception as e:
            logger.error("Database error listing media: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch media", context={"error": str(e)}) from e
        return [MediaResponse.model_validate(m) for m in items]

    async def get_media(self, db: AsyncSession, media_id: str) -> MediaResponse:
        try:
            media = await self._get(db, media_id)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error("Database error fetching media %s: %s", media_id, str(e))
            raise DatabaseError(message="Failed to fetch media", context={"error": str(e)}) from e
        return MediaResponse.model_validate(media)

    async def usage(self, db: AsyncSession, media_id: str) -> MediaUsageResponse:
        """
        Where a file is referenced.

        Tours match on an exact heroImage URL. Stops match when the URL
        appears anywhere in their image or in their serialized content
        blocks; usageType is "image" when the image field matches.
        """
        try:
            media = await self._get(db, media_id)
            url = media.url

            hero = await db.execute(
                select(Tour.id, Tour.title, Tour.slug).where(Tour.hero_image == url)
            )
            tours = [
                TourUsage(id=row.id, title=row.title, slug=row.slug)
                for row in hero.all()
            ]

            titles = await db.execute(select(Tour.id, Tour.title))
            tour_titles: Dict[str, Any] = {row.id: row.title for row in titles.all()}

            rows = await db.execute(
                select(Stop.id, Stop.title, Stop.slug, Stop.tour_id, Stop.image, Stop.content)
            )
            stops = []
            for row in rows.all():
                in_image = url in _as_text(row.image)
                if not in_image and url not in _as_text(row.content):
                    continue
                stops.append(StopUsage(
                    id=row.id,
                    title=row.title,
                    slug=row.slug,
                    tour_id=row.tour_id,
                    tour_title=tour_titles.get(row.tour_id),
                    usage_type="image" if in_image else "content",
                ))
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error fetching usage of %s: %s", media_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch media usage", context={"error": str(e)}) from e

        return MediaUsageResponse(tours=tours, stops=stops)

    # ── Uploads ───────────────────────────────────────────────────────────

    async def create_media(
        self,
        db: AsyncSession,
        filename: str,
        content: bytes,
        mime_type: str,
        alt: Optional[str] = None,
        caption: Optional[str] = None,
        tags: Optional[str] = None,
        width: Optional[str] = None,
        height: Optional[str] = None,
        duration: Optional[str] = None,
    ) -> MediaResponse:
        """Store a file and record it in the library."""
        parsed_tags = _parse_tags(tags)
        parsed_width = _parse_number(width, int, "width")
        parsed_height = _parse_number(height, int, "height")
        parsed_duration = _parse_number(duration, float, "duration")

        stored = await self.files.store_upload(filename, content, mime_type)
        try:
            media = Media(
                filename=filename,
                mime_type=mime_type,
                size=stored.size,
                url=stored.url,
                alt=alt or None,
                caption=caption or None,
                tags=parsed_tags,
                width=parsed_width,
                height=parsed_height,
                duration=parsed_duration,
            )
            db.add(media)
            await db.flush()
        except Exception as e:
            logger.error("Database error recording upload %s: %s", stored.url, str(e), exc_info=True)
            await self.files.cleanup_file(stored.url)
            raise DatabaseError(message="Failed to upload file", context={"error": str(e)}) from e

        logger.info("Media uploaded: %s (%s, %d bytes)", media.id, mime_type, stored.size)
        return MediaResponse.model_validate(media)

    async def quick_upload(self, filename: str, content: bytes, mime_type: str) -> UploadResult:
        """Store a file without a library row (inline content images)."""
        stored = await self.files.store_upload(filename, content, mime_type)
        return UploadResult(url=stored.url, filename=filename, mime_type=mime_type, size=stored.size)

    # ── Updates ───────────────────────────────────────────────────────────

    async def update_media(self, db: AsyncSession, media_id: str, data: MediaUpdate) -> MediaResponse:
        try:
            media = await self._get(db, media_id)
            for key, value in data.model_dump(exclude_unset=True).items():
                setattr(media, key, value)
            await db.flush()
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error updating media %s: %s", media_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to update media", context={"error": str(e)}) from e
        return MediaResponse.model_validate(media)

    async def bulk_tags(self, db: AsyncSession, data: BulkTagsRequest) -> None:
        """
        mode="replace" overwrites the tags of every listed item; mode="add"
        merges the new tags after the existing ones, dropping duplicates.
        """
        if not data.ids:
            raise ValidationError(message="No IDs provided", field="ids")
        if data.tags is None:
            raise ValidationError(message="No tags provided", field="tags")

        try:
            result = await db.execute(select(Media).where(Media.id.in_(data.ids)))
            for media in result.scalars().all():
                if data.mode == "replace":
                    media.tags = list(data.tags)
                else:
                    media.tags = list(dict.fromkeys([*(media.tags or []), *data.tags]))
            await db.flush()
        except Exception as e:
            logger.error("Database error updating tags: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to update tags", context={"error": str(e)}) from e
        logger.info("Tags %s on %d media items", "replaced" if data.mode == "replace" else "added", len(data.ids))

    # ── Deletion ──────────────────────────────────────────────────────────

    async def delete_media(self, db: AsyncSession, media_id: str) -> None:
        """
        Remove the row, then the file once the delete has flushed. A file
        that cannot be removed is logged and left behind.
        """
        try:
            media = await self._get(db, media_id)
            url = media.url
            await db.delete(media)
            await db.flush()
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error deleting media %s: %s", media_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to delete media", context={"error": str(e)}) from e

        await self.files.cleanup_file(url)
        logger.info("Media deleted: %s", media_id)

    async def bulk_delete(self, db: AsyncSession, ids: Optional[List[str]]) -> int:
        """Delete every listed item; unknown ids are ignored. Returns the count deleted."""
        if not ids:
            raise ValidationError(message="No IDs provided", field="ids")

        try:
            result = await db.execute(select(Media).where(Media.id.in_(ids)))
            items = result.scalars().all()
            urls = [media.url for media in items]
            for media in items:
                await db.delete(media)
            await db.flush()
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error bulk deleting media: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to delete media items", context={"error": str(e)}) from e

        for url in urls:
            await self.files.cleanup_file(url)

        logger.info("Bulk deleted %d media items", len(items))
        return len(items)

    # ── Disk Sync ─────────────────────────────────────────────────────────

    async def sync(self, db: AsyncSession) -> SyncResult:
        """
        Register files under uploads/{images,audio,documents} that have no
        media row (e.g. copied in by hand). Files already known by URL are
        skipped; a file that cannot be recorded is counted as an error and
        the sync carries on.
        """
        added = skipped = errors = 0
        try:
            result = await db.execute(select(Media.url))
            known = set(result.scalars().all())

            for found in self.files.scan_uploads():
                if found.url in known:
                    skipped += 1
                    continue
                try:
                    async with db.begin_nested():
                        db.add(Media(
                            filename=found.filename,
                            mime_type=found.mime_type,
                            size=found.size,
                            url=found.url,
                            created_at=found.created_at,
                            updated_at=found.modified_at,
                        ))
                    added += 1
                except Exception as e:
                    logger.error("Error syncing file %s: %s", found.filename, str(e))
                    errors += 1
        except Exception as e:
            logger.error("Media sync failed: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to sync media", context={"error": str(e)}) from e

        logger.info("Media sync: %d added, %d skipped, %d errors", added, skipped, errors)
        return SyncResult(
            message=f"Sync complete: {added} added, {skipped} already exist, {errors} errors",
            added=added,
            skipped=skipped,
            errors=errors,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
media_service = MediaService()
