"""
TourStack Backend — Health Check Route

GET /api/health answers as long as the process can serve requests; it does
not probe the database or the Google APIs (their own /status endpoints do).
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from tourstack.schemas.common import HealthResponse, to_iso

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=to_iso(datetime.now(timezone.utc)))
