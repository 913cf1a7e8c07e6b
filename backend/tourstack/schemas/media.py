"""
TourStack Backend — Media Library Schemas
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator

from tourstack.schemas.common import CamelModel, UTCDateTime


class MediaResponse(CamelModel):
    id: str
    museum_id: Optional[str] = None
    filename: str
    mime_type: str
    size: int
    url: str
    alt: Optional[str] = None
    caption: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[float] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime

    @field_validator("tags", mode="before")
    @classmethod
    def none_as_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v


class MediaUpdate(CamelModel):
    alt: Optional[str] = None
    caption: Optional[str] = None
    tags: Optional[List[str]] = None


class BulkDeleteRequest(CamelModel):
    ids: Optional[List[str]] = None


class BulkTagsRequest(CamelModel):
    ids: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    mode: Literal["add", "replace"] = "add"


class UploadResult(CamelModel):
    """Returned by POST /api/media/upload (file stored, no library row)."""
    url: str
    filename: str
    mime_type: str
    size: int


class SyncResult(CamelModel):
    message: str
    added: int
    skipped: int
    errors: int


class TourUsage(CamelModel):
    id: str
    title: Dict[str, Any]
    slug: str
    usage_type: str = "heroImage"


class StopUsage(CamelModel):
    id: str
    title: Dict[str, Any]
    slug: str
    tour_id: str
    tour_title: Optional[Dict[str, Any]] = None
    usage_type: Literal["image", "content"]


class MediaUsageResponse(CamelModel):
    tours: List[TourUsage] = Field(default_factory=list)
    stops: List[StopUsage] = Field(default_factory=list)
