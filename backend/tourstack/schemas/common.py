"""
TourStack Backend — Shared Schema Building Blocks
===================================================

What:  Base model and field types shared by every request/response schema.
Why:   The editor frontend speaks camelCase JSON (customFields, createdAt,
       contentBlocks); Python code uses snake_case. CamelModel bridges the
       two so ORM objects can be returned directly from routes.
How:   alias_generator=to_camel for the wire format, populate_by_name so
       tests and services can use snake_case, from_attributes so ORM rows
       validate without manual mapping.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel


def to_iso(value: datetime) -> str:
    """
    ISO-8601 in UTC with millisecond precision and a Z suffix
    (e.g. 2024-05-01T09:30:00.123Z). SQLite hands back naive datetimes;
    they are stored as UTC, so they are read as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


UTCDateTime = Annotated[datetime, PlainSerializer(to_iso, return_type=str)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Error body returned by every failing endpoint.

    Example:
        {"error": "Template not found"}
        {"error": "API key not valid", "details": {"code": 400, ...}}
    """
    error: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Upstream or validation details")


class HealthResponse(BaseModel):
    status: str = Field(description="Always 'ok' when the process can answer")
    timestamp: str = Field(description="Server time, ISO-8601 UTC")


class SuccessResponse(BaseModel):
    success: bool = True
