"""
TourStack Backend — Gemini Image Analysis Route
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from tourstack.schemas.common import ErrorResponse
from tourstack.schemas.google import GeminiAnalyzeRequest
from tourstack.services.gemini_service import GeminiService, gemini_service

router = APIRouter(prefix="/api/gemini", tags=["Gemini"])


def get_gemini_service() -> GeminiService:
    return gemini_service


@router.post(
    "/analyze",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Catalog description, tags and colors for one image",
)
async def analyze(
    body: GeminiAnalyzeRequest,
    service: GeminiService = Depends(get_gemini_service),
) -> Dict[str, Any]:
    return await service.analyze_image(body)
