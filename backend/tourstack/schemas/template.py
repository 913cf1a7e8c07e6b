"""
TourStack Backend — Template Schemas
"""

from typing import Any, Optional

from pydantic import Field

from tourstack.schemas.common import CamelModel, UTCDateTime


class TemplateResponse(CamelModel):
    """
    What:  A template as returned by GET /api/templates and /api/templates/{id}.
    customFields is always the parsed JSON value (usually a list of field
    definitions), never the stored text.
    """
    id: str
    museum_id: Optional[str] = None
    name: str
    description: str
    icon: str
    built_in: bool
    custom_fields: Any = Field(default_factory=list)
    created_at: UTCDateTime
    updated_at: UTCDateTime


class TemplateCreate(CamelModel):
    name: Optional[str] = None
    description: str = ""
    icon: str = "📍"
    custom_fields: Any = Field(default_factory=list)


class TemplateUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    custom_fields: Any = None
