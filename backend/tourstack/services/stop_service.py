"""
TourStack Backend — Stop Service
==================================

What:  Create, update, delete and reorder the stops of a tour.
Who:   /api/stops routes.

Every new stop gets a QR positioning record pointing at its visitor URL:

    {"method": "qr_code",
     "url": "<base>/visitor/tour/<tour slug>/stop/<stop slug>?t=<token>",
     "shortCode": "K7M2QX"}

The base URL is the origin the editor is talking to, passed in by the route.
"""

import logging
from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourstack.exceptions import DatabaseError, NotFoundError, TourStackError, ValidationError
from tourstack.models.stop import Stop
from tourstack.models.tour import Tour
from tourstack.schemas.tour import StopCreate, StopResponse, StopUpdate
from tourstack.services.slugs import short_code, slugify, title_text, tracking_token, unique_slug

logger = logging.getLogger(__name__)

DEFAULT_STOP_TITLE = {"en": "New Stop"}
DEFAULT_TRIGGERS = {"triggerOnEnter": True, "triggerOnExit": False}
FALLBACK_BASE_URL = "https://tourstack.app"

# Stop columns a client may clear; a falsy value stores NULL
_CLEARABLE_FIELDS = {"backup_positioning", "interactive"}


def apply_stop_changes(stop: Stop, data: StopUpdate) -> None:
    """
    Write the keys present in `data` onto `stop`. `contentBlocks` wins over
    `content`; null clears the clearable fields and is ignored elsewhere.
    """
    changes = data.model_dump(exclude_unset=True, exclude={"id"})
    if "content_blocks" in changes:
        changes["content"] = changes.pop("content_blocks")
    for key, value in changes.items():
        if key in _CLEARABLE_FIELDS:
            value = value or None
        elif value is None:
            continue
        setattr(stop, key, value)


class StopService:

    async def _get(self, db: AsyncSession, stop_id: str) -> Stop:
        stop = await db.get(Stop, stop_id)
        if stop is None:
            raise NotFoundError(resource="Stop", resource_id=stop_id)
        return stop

    async def _ordered(self, db: AsyncSession, tour_id: str) -> List[Stop]:
        result = await db.execute(
            select(Stop).where(Stop.tour_id == tour_id).order_by(Stop.order.asc())
        )
        return list(result.scalars().all())

    async def list_for_tour(self, db: AsyncSession, tour_id: str) -> List[StopResponse]:
        """Stops of a tour by ascending order. An unknown tour yields []."""
        try:
            stops = await self._ordered(db, tour_id)
        except Exception as e:
            logger.error("Database error listing stops of %s: %s", tour_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch stops", context={"error": str(e)}) from e
        return [StopResponse.model_validate(s) for s in stops]

    async def create_stop(self, db: AsyncSession, data: StopCreate, base_url: str = "") -> StopResponse:
        """
        Append a stop to the end of a tour.

        Steps:
            1. Look up the tour (404 if missing)
            2. order = highest existing order + 1 (0 for the first stop)
            3. Slug from the title, unique within the tour
            4. Fresh short code + tracking token for the QR record
        """
        if not data.tour_id:
            raise ValidationError(message="tourId is required", field="tourId")

        try:
            tour = await db.get(Tour, data.tour_id)
            if tour is None:
                raise NotFoundError(resource="Tour", resource_id=data.tour_id)

            result = await db.execute(
                select(func.max(Stop.order)).where(Stop.tour_id == tour.id)
            )
            max_order = result.scalar()
            order = (max_order if max_order is not None else -1) + 1

            title = data.title or dict(DEFAULT_STOP_TITLE)

            async def taken(candidate: str) -> bool:
                found = await db.execute(
                    select(Stop.id).where(Stop.tour_id == tour.id, Stop.slug == candidate).limit(1)
                )
                return found.first() is not None

            slug = await unique_slug(slugify(title_text(title, DEFAULT_STOP_TITLE["en"])), taken)
            visitor_url = (
                f"{base_url or FALLBACK_BASE_URL}/visitor/tour/{tour.slug}/stop/{slug}"
                f"?t={tracking_token()}"
            )

            image = data.image if isinstance(data.image, dict) else (data.image or "")

            stop = Stop(
                tour_id=tour.id,
                slug=slug,
                order=order,
                type=data.type or "mandatory",
                title=title,
                image=image,
                description=data.description or {"en": ""},
                custom_field_values=data.custom_field_values or {},
                primary_positioning={
                    "method": "qr_code",
                    "url": visitor_url,
                    "shortCode": short_code(),
                },
                backup_positioning=data.backup_positioning or None,
                triggers=data.triggers or dict(DEFAULT_TRIGGERS),
                content=data.content or [],
                interactive=data.interactive or None,
                links=data.links or [],
                accessibility=data.accessibility or {},
            )
            db.add(stop)
            await db.flush()
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error creating stop: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to create stop", context={"error": str(e)}) from e

        logger.info("Stop created: %s in tour %s (order=%d)", stop.id, tour.id, order)
        return StopResponse.model_validate(stop)

    async def update_stop(self, db: AsyncSession, stop_id: str, data: StopUpdate) -> StopResponse:
        """
        Partial update. `contentBlocks` wins over `content` when both are sent.
        """
        try:
            stop = await self._get(db, stop_id)
            apply_stop_changes(stop, data)
            await db.flush()
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error updating stop %s: %s", stop_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to update stop", context={"error": str(e)}) from e
        return StopResponse.model_validate(stop)

    async def delete_stop(self, db: AsyncSession, stop_id: str) -> None:
        try:
            stop = await self._get(db, stop_id)
            await db.delete(stop)
            await db.flush()
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error deleting stop %s: %s", stop_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to delete stop", context={"error": str(e)}) from e
        logger.info("Stop deleted: %s", stop_id)

    async def reorder(self, db: AsyncSession, tour_id: str, stop_ids: List[str]) -> List[StopResponse]:
        """Set each stop's order to its index in `stop_ids`; return the tour's stops."""
        try:
            for index, stop_id in enumerate(stop_ids):
                stop = await self._get(db, stop_id)
                stop.order = index
            await db.flush()
            stops = await self._ordered(db, tour_id)
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error reordering stops of %s: %s", tour_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to reorder stops", context={"error": str(e)}) from e
        return [StopResponse.model_validate(s) for s in stops]


# ── Singleton Instance ────────────────────────────────────────────────────
stop_service = StopService()
