"""
TourStack Backend — Google Text-to-Speech Routes
==================================================

What:  /api/google-tts: voices, languages, formats, generation, previews,
       the generated-audio library and a key status check.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tourstack.database import get_db_session
from tourstack.schemas.common import ErrorResponse, SuccessResponse
from tourstack.schemas.google import (
    GenerateAudioRequest,
    GeneratedAudioResponse,
    PreviewRequest,
    TTSLanguage,
    TTSStatus,
    VoicesResponse,
)
from tourstack.services.tts_service import GoogleTTSService, tts_service

router = APIRouter(prefix="/api/google-tts", tags=["Google TTS"])


def get_tts_service() -> GoogleTTSService:
    return tts_service


@router.get(
    "/status",
    response_model=TTSStatus,
    response_model_exclude_none=True,
    summary="Whether the API key can list voices",
)
async def tts_status(service: GoogleTTSService = Depends(get_tts_service)) -> TTSStatus:
    return await service.status()


@router.get("/voices", response_model=VoicesResponse, summary="Standard and Neural2 voices by language")
async def voices(
    language: str = Query(default="", description='Short ("en") or Google ("en-US") code'),
    service: GoogleTTSService = Depends(get_tts_service),
) -> VoicesResponse:
    return await service.voices(language)


@router.get("/formats", summary="Audio encodings and sample rates")
async def formats(service: GoogleTTSService = Depends(get_tts_service)) -> Dict[str, Any]:
    return service.formats()


@router.get("/languages", response_model=List[TTSLanguage], summary="Languages with voice counts")
async def languages(service: GoogleTTSService = Depends(get_tts_service)) -> List[TTSLanguage]:
    return await service.languages()


@router.post(
    "/generate",
    response_model=GeneratedAudioResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Synthesize speech and store the audio file",
)
async def generate(
    body: GenerateAudioRequest,
    db: AsyncSession = Depends(get_db_session),
    service: GoogleTTSService = Depends(get_tts_service),
) -> GeneratedAudioResponse:
    return await service.generate(db, body)


@router.post(
    "/preview",
    response_class=Response,
    responses={200: {"content": {"audio/mpeg": {}}}, 400: {"model": ErrorResponse}},
    summary="MP3 sample of a voice (not stored)",
)
async def preview(
    body: PreviewRequest,
    service: GoogleTTSService = Depends(get_tts_service),
) -> Response:
    audio = await service.preview(body)
    return Response(content=audio, media_type="audio/mpeg")


@router.get("/files", response_model=List[GeneratedAudioResponse], summary="Generated audio, newest first")
async def list_files(
    db: AsyncSession = Depends(get_db_session),
    service: GoogleTTSService = Depends(get_tts_service),
) -> List[GeneratedAudioResponse]:
    return await service.list_files(db)


@router.delete(
    "/files/{audio_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a generated audio file",
)
async def delete_file(
    audio_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: GoogleTTSService = Depends(get_tts_service),
) -> SuccessResponse:
    await service.delete_file(db, audio_id)
    return SuccessResponse()
