"""
TourStack Backend — Tour & Stop Schemas
=========================================

What:  Request/response contracts for /api/tours and /api/stops.

Update schemas are partial: every field is optional and services apply
only the keys the client actually sent (model_dump(exclude_unset=True)),
so `{"backupPositioning": null}` clears a value while omitting the key
leaves it alone.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, computed_field, field_validator

from tourstack.schemas.common import CamelModel, UTCDateTime


# ══════════════════════════════════════════════════════════════════════════
# Stops
# ══════════════════════════════════════════════════════════════════════════


class StopResponse(CamelModel):
    id: str
    tour_id: str
    slug: str
    order: int
    type: str
    title: Dict[str, Any]
    image: Any = ""
    description: Dict[str, Any]
    content: List[Any]
    custom_field_values: Dict[str, Any]
    primary_positioning: Dict[str, Any]
    backup_positioning: Optional[Dict[str, Any]] = None
    triggers: Dict[str, Any]
    interactive: Optional[Dict[str, Any]] = None
    links: List[Any]
    accessibility: Dict[str, Any]
    created_at: UTCDateTime
    updated_at: UTCDateTime

    # The block editor reads contentBlocks; older clients read content
    @computed_field(alias="contentBlocks")
    @property
    def content_blocks(self) -> List[Any]:
        return self.content


class StopCreate(CamelModel):
    tour_id: Optional[str] = None
    type: Optional[str] = None
    title: Optional[Dict[str, Any]] = None
    image: Any = None
    description: Optional[Dict[str, Any]] = None
    content: Optional[List[Any]] = None
    custom_field_values: Optional[Dict[str, Any]] = None
    backup_positioning: Optional[Dict[str, Any]] = None
    triggers: Optional[Dict[str, Any]] = None
    interactive: Optional[Dict[str, Any]] = None
    links: Optional[List[Any]] = None
    accessibility: Optional[Dict[str, Any]] = None


class StopUpdate(CamelModel):
    order: Optional[int] = None
    type: Optional[str] = None
    title: Optional[Dict[str, Any]] = None
    image: Any = None
    description: Optional[Dict[str, Any]] = None
    content: Optional[List[Any]] = None
    content_blocks: Optional[List[Any]] = None
    custom_field_values: Optional[Dict[str, Any]] = None
    primary_positioning: Optional[Dict[str, Any]] = None
    backup_positioning: Optional[Dict[str, Any]] = None
    triggers: Optional[Dict[str, Any]] = None
    interactive: Optional[Dict[str, Any]] = None
    links: Optional[List[Any]] = None
    accessibility: Optional[Dict[str, Any]] = None


class NestedStopUpdate(StopUpdate):
    """A stop embedded in a tour update; rows without an id are ignored."""
    id: Optional[str] = None


class ReorderStopsRequest(CamelModel):
    stop_ids: List[str] = Field(default_factory=list)


# ══════════════════════════════════════════════════════════════════════════
# Tours
# ══════════════════════════════════════════════════════════════════════════


class TourResponse(CamelModel):
    id: str
    museum_id: str
    template_id: Optional[str] = None
    slug: str
    status: str
    title: Dict[str, Any]
    hero_image: str
    description: Dict[str, Any]
    languages: List[str]
    primary_language: str
    duration: int
    difficulty: str
    primary_positioning_method: str
    backup_positioning_method: Optional[str] = None
    accessibility: Dict[str, Any]
    published_at: Optional[UTCDateTime] = None
    version: int
    concierge_enabled: bool
    concierge_persona: Optional[str] = None
    concierge_welcome: Optional[Dict[str, Any]] = None
    concierge_collections: List[Any] = Field(default_factory=list)
    concierge_quick_actions: List[Any] = Field(default_factory=list)
    created_at: UTCDateTime
    updated_at: UTCDateTime
    stops: List[StopResponse] = Field(default_factory=list)

    @field_validator("concierge_collections", "concierge_quick_actions", mode="before")
    @classmethod
    def none_as_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v


class TourCreate(CamelModel):
    template_id: Optional[str] = None
    title: Optional[Dict[str, Any]] = None
    hero_image: Optional[str] = None
    description: Optional[Dict[str, Any]] = None
    languages: Optional[List[str]] = None
    primary_language: Optional[str] = None
    duration: Optional[int] = None
    difficulty: Optional[str] = None
    primary_positioning_method: Optional[str] = None
    backup_positioning_method: Optional[str] = None
    accessibility: Optional[Dict[str, Any]] = None


class TourUpdate(CamelModel):
    title: Optional[Dict[str, Any]] = None
    description: Optional[Dict[str, Any]] = None
    hero_image: Optional[str] = None
    languages: Optional[List[str]] = None
    primary_language: Optional[str] = None
    duration: Optional[int] = None
    difficulty: Optional[str] = None
    status: Optional[str] = None
    accessibility: Optional[Dict[str, Any]] = None
    primary_positioning_method: Optional[str] = None
    backup_positioning_method: Optional[str] = None
    published_at: Optional[datetime] = None
    concierge_enabled: Optional[bool] = None
    concierge_persona: Optional[str] = None
    concierge_welcome: Optional[Dict[str, Any]] = None
    concierge_collections: Optional[List[Any]] = None
    concierge_quick_actions: Optional[List[Any]] = None
    stops: Optional[List[NestedStopUpdate]] = None
