"""
TourStack Backend — Google Translate Routes

/api/google-translate: translate, batch, detect, languages, status.
Upstream failures are relayed with Google's status and message.
"""

from fastapi import APIRouter, Depends, Query

from tourstack.schemas.common import ErrorResponse
from tourstack.schemas.google import (
    BatchTranslateRequest,
    BatchTranslateResponse,
    DetectRequest,
    DetectResponse,
    LanguagesResponse,
    TranslateRequest,
    TranslateResponse,
    TranslateStatus,
)
from tourstack.services.translate_service import GoogleTranslateService, translate_service

router = APIRouter(prefix="/api/google-translate", tags=["Google Translate"])


def get_translate_service() -> GoogleTranslateService:
    return translate_service


@router.post(
    "",
    response_model=TranslateResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}},
    summary="Translate one text",
)
async def translate(
    body: TranslateRequest,
    service: GoogleTranslateService = Depends(get_translate_service),
) -> TranslateResponse:
    return await service.translate(body)


@router.post(
    "/batch",
    response_model=BatchTranslateResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}},
    summary="Translate several texts in one upstream call",
)
async def translate_batch(
    body: BatchTranslateRequest,
    service: GoogleTranslateService = Depends(get_translate_service),
) -> BatchTranslateResponse:
    return await service.translate_batch(body)


@router.post(
    "/detect",
    response_model=DetectResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Detect the language of a text",
)
async def detect(
    body: DetectRequest,
    service: GoogleTranslateService = Depends(get_translate_service),
) -> DetectResponse:
    return await service.detect(body)


@router.get("/languages", response_model=LanguagesResponse, summary="Supported languages")
async def languages(
    target: str = Query(default="en", description="Language to localize the names into"),
    service: GoogleTranslateService = Depends(get_translate_service),
) -> LanguagesResponse:
    return await service.languages(target)


@router.get(
    "/status",
    response_model=TranslateStatus,
    response_model_exclude_none=True,
    summary="Whether the API key works",
)
async def translate_status(
    service: GoogleTranslateService = Depends(get_translate_service),
) -> TranslateStatus:
    return await service.status()
