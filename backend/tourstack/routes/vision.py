"""
TourStack Backend — Google Vision Route
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from tourstack.schemas.common import ErrorResponse
from tourstack.schemas.google import VisionAnalyzeRequest
from tourstack.services.vision_service import VisionService, vision_service

router = APIRouter(prefix="/api/vision", tags=["Vision"])


def get_vision_service() -> VisionService:
    return vision_service


@router.post(
    "/analyze",
    responses={400: {"model": ErrorResponse}},
    summary="Labels, web entities and requested features for one image",
)
async def analyze(
    body: VisionAnalyzeRequest,
    service: VisionService = Depends(get_vision_service),
) -> Dict[str, Any]:
    return await service.analyze(body)
