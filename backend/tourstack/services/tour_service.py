"""
TourStack Backend — Tour Service
==================================

What:  Business logic for tours: list, fetch, create, partial update,
       delete and duplicate.
Why:   Tour creation has several side conditions (a museum to own it, a
       template to base it on, a slug that is unique across tours) that the
       route layer should not know about.
How:   All methods take an AsyncSession from the request dependency. The
       session commits once the route returns, so a failure part-way through
       a duplicate leaves nothing behind.
Who:   /api/tours routes.

Tours always come back with their stops ordered by `order` (selectin
relationship). After a write the tour is re-read with populate_existing so
the response reflects rows changed through other objects (nested stops).
"""

import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourstack.exceptions import DatabaseError, NotFoundError, TourStackError, ValidationError
from tourstack.models.museum import DEFAULT_BRANDING, DEFAULT_MUSEUM_NAME, Museum
from tourstack.models.stop import Stop
from tourstack.models.tour import DEFAULT_ACCESSIBILITY, Tour
from tourstack.schemas.tour import TourCreate, TourResponse, TourUpdate
from tourstack.services.slugs import slugify, title_text, unique_slug
from tourstack.services.stop_service import apply_stop_changes
from tourstack.services.template_service import template_service

logger = logging.getLogger(__name__)

DEFAULT_TOUR_TITLE = {"en": "Untitled Tour"}

# Columns copied verbatim when a tour is duplicated
_DUPLICATED_TOUR_FIELDS = (
    "museum_id",
    "template_id",
    "hero_image",
    "description",
    "languages",
    "primary_language",
    "duration",
    "difficulty",
    "primary_positioning_method",
    "backup_positioning_method",
    "accessibility",
)
_DUPLICATED_STOP_FIELDS = (
    "order",
    "type",
    "title",
    "image",
    "description",
    "content",
    "custom_field_values",
    "primary_positioning",
    "backup_positioning",
    "triggers",
    "interactive",
    "links",
    "accessibility",
)

# Tour columns a client may clear by sending null
_NULLABLE_TOUR_FIELDS = {
    "backup_positioning_method",
    "published_at",
    "concierge_persona",
    "concierge_welcome",
    "concierge_collections",
    "concierge_quick_actions",
}


class TourService:
    """
    Tour CRUD.

    Error policy:
        - Unknown id → NotFoundError ("Tour not found")
        - No template in the database → ValidationError ("No templates available")
        - Anything the database raises → DatabaseError with the operation name
    """

    # ── Internal Helpers ──────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, tour_id: str) -> Tour:
        result = await db.execute(
            select(Tour)
            .where(Tour.id == tour_id)
            .execution_options(populate_existing=True)
        )
        tour = result.scalar_one_or_none()
        if tour is None:
            raise NotFoundError(resource="Tour", resource_id=tour_id)
        return tour

    async def _slug_taken(self, db: AsyncSession, slug: str) -> bool:
        result = await db.execute(select(Tour.id).where(Tour.slug == slug).limit(1))
        return result.first() is not None

    async def _default_museum(self, db: AsyncSession) -> Museum:
        result = await db.execute(select(Museum).limit(1))
        museum = result.scalars().first()
        if museum is None:
            museum = Museum(name=DEFAULT_MUSEUM_NAME, branding=dict(DEFAULT_BRANDING))
            db.add(museum)
            await db.flush()
            logger.info("Created default museum: %s", museum.id)
        return museum

    async def _stop_slug(self, db: AsyncSession, tour_id: str, title: Dict[str, Any]) -> str:
        async def taken(slug: str) -> bool:
            result = await db.execute(
                select(Stop.id).where(Stop.tour_id == tour_id, Stop.slug == slug).limit(1)
            )
            return result.first() is not None

        return await unique_slug(slugify(title_text(title, "stop")), taken)

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_tours(self, db: AsyncSession) -> List[TourResponse]:
        """All tours, most recently updated first, each with its stops."""
        try:
            result = await db.execute(select(Tour).order_by(Tour.updated_at.desc()))
            tours = result.scalars().all()
        except Exception as e:
            logger.error("Database error listing tours: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch tours", context={"error": str(e)}) from e
        return [TourResponse.model_validate(t) for t in tours]

    async def get_tour(self, db: AsyncSession, tour_id: str) -> TourResponse:
        try:
            tour = await self._load(db, tour_id)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error("Database error fetching tour %s: %s", tour_id, str(e))
            raise DatabaseError(message="Failed to fetch tour", context={"error": str(e)}) from e
        return TourResponse.model_validate(tour)

    # ── Mutations ─────────────────────────────────────────────────────────

    async def create_tour(self, db: AsyncSession, data: TourCreate) -> TourResponse:
        """
        Create a draft tour.

        The slug comes from the English title (or the first title present),
        suffixed -1, -2, ... until no other tour uses it.
        """
        try:
            museum = await self._default_museum(db)
            template = await template_service.find_for_tour(db, data.template_id)
            if template is None:
                raise ValidationError(message="No templates available", field="templateId")

            title = data.title or dict(DEFAULT_TOUR_TITLE)
            base = slugify(title_text(title, DEFAULT_TOUR_TITLE["en"]))
            slug = await unique_slug(base, lambda s: self._slug_taken(db, s))

            tour = Tour(
                museum_id=museum.id,
                template_id=template.id,
                slug=slug,
                status="draft",
                title=title,
                hero_image=data.hero_image or "",
                description=data.description or {"en": ""},
                languages=data.languages or ["en"],
                primary_language=data.primary_language or "en",
                duration=data.duration or 30,
                difficulty=data.difficulty or "general",
                primary_positioning_method=data.primary_positioning_method or "qr_code",
                backup_positioning_method=data.backup_positioning_method or None,
                accessibility=data.accessibility or dict(DEFAULT_ACCESSIBILITY),
            )
            db.add(tour)
            await db.flush()
            tour = await self._load(db, tour.id)
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error creating tour: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to create tour", context={"error": str(e)}) from e

        logger.info("Tour created: %s (slug=%s)", tour.id, tour.slug)
        return TourResponse.model_validate(tour)

    async def update_tour(self, db: AsyncSession, tour_id: str, data: TourUpdate) -> TourResponse:
        """
        Apply only the keys present in the request.

        `stops`, when present, is a list of partial stop objects belonging
        to this tour; those with an id are patched in place like
        PUT /api/stops/{id}, the rest are ignored (stops are created through
        /api/stops).
        """
        try:
            tour = await self._load(db, tour_id)
            changes = data.model_dump(exclude_unset=True, exclude={"stops"})
            for key, value in changes.items():
                if value is None and key not in _NULLABLE_TOUR_FIELDS:
                    continue
                setattr(tour, key, value)

            for stop_data in data.stops or []:
                if not stop_data.id:
                    continue
                stop = await db.get(Stop, stop_data.id)
                # Stops of other tours are reported as missing
                if stop is None or stop.tour_id != tour_id:
                    raise NotFoundError(resource="Stop", resource_id=stop_data.id)
                apply_stop_changes(stop, stop_data)

            await db.flush()
            tour = await self._load(db, tour_id)
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error updating tour %s: %s", tour_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to update tour", context={"error": str(e)}) from e

        logger.info("Tour updated: %s (%s)", tour_id, ", ".join(sorted(changes)) or "stops only")
        return TourResponse.model_validate(tour)

    async def delete_tour(self, db: AsyncSession, tour_id: str) -> None:
        """Delete a tour and, through the relationship cascade, its stops."""
        try:
            tour = await self._load(db, tour_id)
            await db.delete(tour)
            await db.flush()
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error deleting tour %s: %s", tour_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to delete tour", context={"error": str(e)}) from e
        logger.info("Tour deleted: %s", tour_id)

    async def duplicate_tour(self, db: AsyncSession, tour_id: str) -> TourResponse:
        """
        Copy a tour and all of its stops.

        Every title language gets " (Copy)" appended and the copy starts as a
        draft. Stops keep order, type and content; their slugs are rebuilt
        from their titles.
        """
        try:
            original = await self._load(db, tour_id)

            new_title = {lang: f"{text} (Copy)" for lang, text in (original.title or {}).items()}
            base = slugify(title_text(new_title, "tour"))
            slug = await unique_slug(base, lambda s: self._slug_taken(db, s))

            duplicate = Tour(
                slug=slug,
                status="draft",
                title=new_title,
                **{field: getattr(original, field) for field in _DUPLICATED_TOUR_FIELDS},
            )
            db.add(duplicate)
            await db.flush()

            for stop in original.stops:
                db.add(Stop(
                    tour_id=duplicate.id,
                    slug=await self._stop_slug(db, duplicate.id, stop.title),
                    **{field: getattr(stop, field) for field in _DUPLICATED_STOP_FIELDS},
                ))
                # Flush each stop so the next slug check sees it
                await db.flush()

            result = await self._load(db, duplicate.id)
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error duplicating tour %s: %s", tour_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to duplicate tour", context={"error": str(e)}) from e

        logger.info("Tour duplicated: %s -> %s (%d stops)", tour_id, result.id, len(result.stops))
        return TourResponse.model_validate(result)


# ── Singleton Instance ────────────────────────────────────────────────────
tour_service = TourService()
