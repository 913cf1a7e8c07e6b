"""
TourStack Backend — Template Service
======================================

What:  CRUD over the `templates` table plus idempotent seeding of the
       built-in positioning templates.
Who:   /api/templates routes, TourService (template lookup), the seed command.

customFields goes through the JSONText column type, so every value read
here is already a list and every value written is serialized on flush.
Failures reading or writing are logged and surface as DatabaseError with
an operation-level message ("Failed to fetch templates"); nothing retries.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourstack.exceptions import DatabaseError, NotFoundError, TourStackError, ValidationError
from tourstack.models.template import Template
from tourstack.schemas.template import TemplateCreate, TemplateResponse, TemplateUpdate
from tourstack.services.builtin_templates import BUILTIN_TEMPLATES

logger = logging.getLogger(__name__)


class TemplateService:

    async def _get(self, db: AsyncSession, template_id: str) -> Template:
        template = await db.get(Template, template_id)
        if template is None:
            raise NotFoundError(resource="Template", resource_id=template_id)
        return template

    async def list_templates(self, db: AsyncSession) -> List[TemplateResponse]:
        """All templates, ordered by name ascending."""
        try:
            result = await db.execute(select(Template).order_by(Template.name.asc()))
            templates = result.scalars().all()
        except Exception as e:
            logger.error("Database error listing templates: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch templates", context={"error": str(e)}) from e
        return [TemplateResponse.model_validate(t) for t in templates]

    async def get_template(self, db: AsyncSession, template_id: str) -> TemplateResponse:
        try:
            template = await self._get(db, template_id)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error("Database error fetching template %s: %s", template_id, str(e))
            raise DatabaseError(message="Failed to fetch template", context={"error": str(e)}) from e
        return TemplateResponse.model_validate(template)

    async def create_template(self, db: AsyncSession, data: TemplateCreate) -> TemplateResponse:
        if not data.name or not data.name.strip():
            raise ValidationError(message="Name is required", field="name")
        try:
            template = Template(
                name=data.name.strip(),
                description=data.description,
                icon=data.icon,
                built_in=False,
                custom_fields=data.custom_fields if data.custom_fields is not None else [],
            )
            db.add(template)
            await db.flush()
        except Exception as e:
            logger.error("Database error creating template: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to create template", context={"error": str(e)}) from e
        logger.info("Template created: %s (%s)", template.id, template.name)
        return TemplateResponse.model_validate(template)

    async def update_template(self, db: AsyncSession, template_id: str, data: TemplateUpdate) -> TemplateResponse:
        try:
            template = await self._get(db, template_id)
            for key, value in data.model_dump(exclude_unset=True).items():
                if value is None:
                    continue
                setattr(template, key, value)
            await db.flush()
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error updating template %s: %s", template_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to update template", context={"error": str(e)}) from e
        return TemplateResponse.model_validate(template)

    async def delete_template(self, db: AsyncSession, template_id: str) -> None:
        try:
            template = await self._get(db, template_id)
            await db.delete(template)
            await db.flush()
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error deleting template %s: %s", template_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to delete template", context={"error": str(e)}) from e
        logger.info("Template deleted: %s", template_id)

    async def find_for_tour(self, db: AsyncSession, template_id: Optional[str]) -> Optional[Template]:
        """The requested template, else any template, else None."""
        if template_id:
            template = await db.get(Template, template_id)
            if template is not None:
                return template
        result = await db.execute(select(Template).limit(1))
        return result.scalars().first()

    async def seed_builtin_templates(
        self,
        db: AsyncSession,
        templates: Optional[List[Dict[str, Any]]] = None,
    ) -> List[str]:
        """
        Insert each built-in template that is not already present.

        A template counts as present when a built-in row with the same
        name exists, so running this twice creates nothing the second time.
        Returns the names that were created.
        """
        created = []
        for definition in templates if templates is not None else BUILTIN_TEMPLATES:
            result = await db.execute(
                select(Template.id).where(
                    Template.name == definition["name"],
                    Template.built_in.is_(True),
                )
            )
            if result.first() is not None:
                logger.info("Template already exists: %s", definition["name"])
                continue
            db.add(Template(built_in=True, **definition))
            created.append(definition["name"])
            logger.info("Created template: %s", definition["name"])
        await db.flush()
        return created


# ── Singleton Instance ────────────────────────────────────────────────────
template_service = TemplateService()
