"""
TourStack Backend — Google Cloud Text-to-Speech Proxy
=======================================================

What:  Voice listing, speech synthesis to files, quick previews and the
       library of generated audio, via Google Cloud Text-to-Speech v1.
Why:   Tour narration is generated in the editor; the resulting files are
       referenced from audio content blocks like any other upload.
How:   - Voice list: GET /voices, filtered to Standard + Neural2 voices,
         cached in memory for `cache_ttl` seconds.
       - Synthesis: POST /text:synthesize, base64 `audioContent` decoded and
         written by FileService to uploads/audio/generated/<uuid><ext>, then
         recorded as a GeneratedAudio row.
Who:   /api/google-tts routes.

Voice names follow <lang>-<region>-<Type>-<Variant>, e.g. en-US-Neural2-D.
The language code sent to Google is always taken from the voice name.
"""

import base64
import binascii
import logging
import re
import time
from typing import Any, Dict, List, Optional, Tuple

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourstack.config import settings
from tourstack.exceptions import DatabaseError, NotFoundError, TourStackError, UpstreamError, ValidationError
from tourstack.models.generated_audio import GeneratedAudio
from tourstack.schemas.google import (
    GenerateAudioRequest,
    GeneratedAudioResponse,
    PreviewRequest,
    TTSLanguage,
    TTSStatus,
    Voice,
    VoicesResponse,
)
from tourstack.services.file_service import FileService, file_service
from tourstack.services.google_client import GoogleAPIClient

logger = logging.getLogger(__name__)

TTS_API_URL = "https://texttospeech.googleapis.com/v1"

# Google rejects synthesis input above this many UTF-8 bytes
MAX_TEXT_BYTES = 5000

# ── Static Data ───────────────────────────────────────────────────────────

FORMATS = [
    {"id": "MP3", "name": "MP3", "mimeType": "audio/mpeg", "extension": ".mp3"},
    {"id": "LINEAR16", "name": "WAV (PCM 16-bit)", "mimeType": "audio/wav", "extension": ".wav"},
    {"id": "OGG_OPUS", "name": "OGG Opus", "mimeType": "audio/ogg", "extension": ".ogg"},
]

SAMPLE_RATES = [
    {"id": 16000, "name": "16 kHz (Compact)"},
    {"id": 24000, "name": "24 kHz (Standard)", "default": True},
    {"id": 44100, "name": "44.1 kHz (High Quality)"},
    {"id": 48000, "name": "48 kHz (Studio)"},
]

# Editor language code -> Google BCP-47 code
LANGUAGE_CODE_MAP = {
    "en": "en-US", "es": "es-ES", "fr": "fr-FR", "de": "de-DE",
    "it": "it-IT", "ja": "ja-JP", "nl": "nl-NL", "ko": "ko-KR",
    "pt": "pt-BR", "zh": "cmn-CN", "ar": "ar-XA", "hi": "hi-IN",
    "ru": "ru-RU", "pl": "pl-PL", "sv": "sv-SE", "da": "da-DK",
    "fi": "fi-FI", "nb": "nb-NO", "tr": "tr-TR", "uk": "uk-UA",
    "vi": "vi-VN", "th": "th-TH", "id": "id-ID", "cs": "cs-CZ",
    "el": "el-GR", "hu": "hu-HU", "ro": "ro-RO", "sk": "sk-SK",
    "bg": "bg-BG", "ms": "ms-MY", "he": "he-IL",
}
REVERSE_LANGUAGE_MAP = {bcp47: short for short, bcp47 in LANGUAGE_CODE_MAP.items()}

LANGUAGE_NAMES = {
    "en": "English", "es": "Spanish", "fr": "French", "de": "German",
    "it": "Italian", "ja": "Japanese", "nl": "Dutch", "ko": "Korean",
    "pt": "Portuguese", "zh": "Chinese", "ar": "Arabic", "hi": "Hindi",
    "ru": "Russian", "pl": "Polish", "sv": "Swedish", "da": "Danish",
    "fi": "Finnish", "nb": "Norwegian", "tr": "Turkish", "uk": "Ukrainian",
    "vi": "Vietnamese", "th": "Thai", "id": "Indonesian", "cs": "Czech",
    "el": "Greek", "hu": "Hungarian", "ro": "Romanian", "sk": "Slovak",
    "bg": "Bulgarian", "ms": "Malay", "he": "Hebrew",
}

SUPPORTED_VOICE_TYPES = ("Standard", "Neural2")

SAMPLE_TEXTS = {
    "en": "Hello! This is a sample of my voice. Welcome to the museum tour.",
    "es": "¡Hola! Esta es una muestra de mi voz. Bienvenido al recorrido del museo.",
    "fr": "Bonjour! Ceci est un échantillon de ma voix. Bienvenue dans la visite du musée.",
    "de": "Hallo! Dies ist eine Probe meiner Stimme. Willkommen zur Museumsführung.",
    "it": "Ciao! Questo è un esempio della mia voce. Benvenuto al tour del museo.",
    "ja": "こんにちは！これは私の声のサンプルです。美術館ツアーへようこそ。",
    "nl": "Hallo! Dit is een voorbeeld van mijn stem. Welkom bij de museumrondleiding.",
    "ko": "안녕하세요! 이것은 제 목소리의 샘플입니다. 박물관 투어에 오신 것을 환영합니다.",
    "pt": "Olá! Esta é uma amostra da minha voz. Bem-vindo ao tour do museu.",
    "zh": "你好！这是我的声音样本。欢迎参加博物馆之旅。",
}


# ── Voice Name Helpers ────────────────────────────────────────────────────

def voice_type(name: str) -> str:
    """'en-US-Neural2-D' -> 'Neural2'; 'en-US-StandardA' -> 'Standard'."""
    parts = name.split("-")
    if len(parts) >= 3:
        return re.sub(r"[A-Z]$", "", parts[2])
    return "Unknown"


def voice_display_name(name: str) -> str:
    """'en-US-Neural2-D' -> 'Neural2 D'."""
    parts = name.split("-")
    if len(parts) >= 4:
        return f"{parts[2]} {parts[3]}"
    if len(parts) >= 3:
        return parts[2]
    return name


def language_code_for(voice_id: str) -> str:
    """'en-US-Neural2-D' -> 'en-US'."""
    parts = voice_id.split("-")
    if len(parts) >= 2:
        return f"{parts[0]}-{parts[1]}"
    return "en-US"


def format_for(encoding: str) -> Dict[str, str]:
    for fmt in FORMATS:
        if fmt["id"] == encoding:
            return fmt
    return FORMATS[0]


class GoogleTTSService(GoogleAPIClient):
    """
    Text-to-Speech proxy with a generated-audio library.

    Args:
        api_key:    Shared Google key (GOOGLE_VISION_API_KEY).
        referer:    Referer header value.
        files:      Where generated audio is written.
        cache_ttl:  Seconds the filtered voice list stays cached (0 disables).
    """

    service_name = "Google Cloud TTS"

    def __init__(
        self,
        api_key: str,
        referer: str,
        files: Optional[FileService] = None,
        cache_ttl: int = 3600,
        base_url: str = TTS_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key=api_key, base_url=base_url, referer=referer, transport=transport)
        self.files = files or file_service
        self.cache_ttl = cache_ttl
        self._voice_cache: Optional[Tuple[float, List[Dict[str, Any]]]] = None

    # ── Voices ────────────────────────────────────────────────────────────

    async def fetch_voices(self) -> List[Dict[str, Any]]:
        """Standard + Neural2 voices as Google reports them, cached."""
        if self._voice_cache is not None:
            fetched_at, voices = self._voice_cache
            if time.monotonic() - fetched_at < self.cache_ttl:
                return voices

        payload = await self.request("GET", "/voices")
        all_voices = payload.get("voices") or []
        voices = [v for v in all_voices if voice_type(v.get("name", "")) in SUPPORTED_VOICE_TYPES]
        self._voice_cache = (time.monotonic(), voices)
        logger.info("Cached %d voices (filtered from %d total)", len(voices), len(all_voices))
        return voices

    async def voices(self, language: str = "") -> VoicesResponse:
        """
        Voices grouped by editor language code, Neural2 before Standard and
        then by name. `language` matches either the short code ("en") or
        the Google code ("en-US").
        """
        grouped: Dict[str, List[Voice]] = {}
        for v in await self.fetch_voices():
            for lang_code in v.get("languageCodes") or []:
                short = REVERSE_LANGUAGE_MAP.get(lang_code)
                if not short:
                    continue
                if language and language not in (short, lang_code):
                    continue
                grouped.setdefault(short, []).append(Voice(
                    id=v["name"],
                    name=v["name"],
                    display_name=voice_display_name(v["name"]),
                    language_code=lang_code,
                    ssml_gender=v.get("ssmlGender"),
                    type=voice_type(v["name"]),
                    natural_sample_rate_hertz=v.get("naturalSampleRateHertz"),
                ))

        for entries in grouped.values():
            entries.sort(key=lambda e: (e.type != "Neural2", e.name))
        return VoicesResponse(voices=grouped, language=language or "all")

    async def languages(self) -> List[TTSLanguage]:
        counts: Dict[str, int] = {}
        for v in await self.fetch_voices():
            for lang_code in v.get("languageCodes") or []:
                short = REVERSE_LANGUAGE_MAP.get(lang_code)
                if short:
                    counts[short] = counts.get(short, 0) + 1

        result = [
            TTSLanguage(
                code=code,
                name=LANGUAGE_NAMES.get(code, code),
                google_code=LANGUAGE_CODE_MAP.get(code, code),
                voice_count=count,
            )
            for code, count in counts.items()
        ]
        return sorted(result, key=lambda l: l.name)

    def formats(self) -> Dict[str, Any]:
        return {"formats": FORMATS, "sampleRates": SAMPLE_RATES}

    async def status(self) -> TTSStatus:
        """Whether the key can list voices. Never raises."""
        if not self.configured:
            return TTSStatus(configured=False, error="Google API key not configured")
        try:
            voices = await self.fetch_voices()
        except TourStackError as e:
            return TTSStatus(configured=True, valid=False, error=e.message)
        return TTSStatus(configured=True, valid=True, voice_count=len(voices))

    # ── Synthesis ─────────────────────────────────────────────────────────

    async def _synthesize(self, text: str, voice_id: str, audio_config: Dict[str, Any]) -> bytes:
        payload = await self.request(
            "POST",
            "/text:synthesize",
            json={
                "input": {"text": text},
                "voice": {"languageCode": language_code_for(voice_id), "name": voice_id},
                "audioConfig": audio_config,
            },
        )
        try:
            return base64.b64decode(payload["audioContent"])
        except (KeyError, TypeError, binascii.Error) as e:
            raise UpstreamError(
                status_code=502,
                message="No audio content returned",
                details=payload,
            ) from e

    async def generate(self, db: AsyncSession, data: GenerateAudioRequest) -> GeneratedAudioResponse:
        """
        Synthesize `text` with `voice_id` and keep the result.

        Validation happens before any outbound call:
            - text must be non-blank
            - voiceId must be present
            - stripped text must fit in 5000 UTF-8 bytes
        """
        if not data.text or not data.text.strip():
            raise ValidationError(message="Text is required", field="text")
        if not data.voice_id:
            raise ValidationError(message="Voice ID is required", field="voiceId")

        text = data.text.strip()
        size = len(text.encode("utf-8"))
        if size > MAX_TEXT_BYTES:
            raise ValidationError(
                message=f"Text exceeds Google TTS limit ({size} bytes, max {MAX_TEXT_BYTES})",
                field="text",
                details={"hint": "Shorten your text or split it into multiple parts"},
            )

        audio = await self._synthesize(text, data.voice_id, {
            "audioEncoding": data.encoding,
            "sampleRateHertz": data.sample_rate,
            "speakingRate": data.speaking_rate,
            "pitch": data.pitch,
        })
        stored = await self.files.write_generated_audio(audio, format_for(data.encoding)["extension"])

        voice_name = data.voice_name or voice_display_name(data.voice_id)
        try:
            record = GeneratedAudio(
                name=data.name or f"Google TTS - {voice_name}",
                text=text,
                voice_id=data.voice_id,
                voice_name=voice_name,
                language_code=language_code_for(data.voice_id),
                encoding=data.encoding,
                sample_rate=data.sample_rate,
                file_path=stored.relative_path,
                file_url=stored.url,
                file_size=stored.size,
                provider="google_cloud",
            )
            db.add(record)
            await db.flush()
        except Exception as e:
            logger.error("Database error recording generated audio: %s", str(e), exc_info=True)
            await self.files.cleanup_file(stored.relative_path)
            raise DatabaseError(message="Failed to save generated audio", context={"error": str(e)}) from e

        logger.info("Generated %d bytes for voice %s -> %s", stored.size, data.voice_id, stored.url)
        return GeneratedAudioResponse.model_validate(record)

    async def preview(self, data: PreviewRequest) -> bytes:
        """MP3 bytes of a short sample in the voice's language. Nothing is stored."""
        if not data.voice_id:
            raise ValidationError(message="Voice ID is required", field="voiceId")

        short = REVERSE_LANGUAGE_MAP.get(language_code_for(data.voice_id), "en")
        text = data.text or SAMPLE_TEXTS.get(short) or SAMPLE_TEXTS["en"]
        return await self._synthesize(text, data.voice_id, {
            "audioEncoding": "MP3",
            "sampleRateHertz": 24000,
        })

    # ── Generated Audio Library ───────────────────────────────────────────

    async def list_files(self, db: AsyncSession) -> List[GeneratedAudioResponse]:
        """Newest first."""
        try:
            result = await db.execute(
                select(GeneratedAudio).order_by(GeneratedAudio.created_at.desc())
            )
            records = result.scalars().all()
        except Exception as e:
            logger.error("Database error listing generated audio: %s", str(e), exc_info=True)
            raise DatabaseError(message="Failed to fetch audio files", context={"error": str(e)}) from e
        return [GeneratedAudioResponse.model_validate(r) for r in records]

    async def delete_file(self, db: AsyncSession, audio_id: str) -> None:
        """Remove the file from disk (if still there) and its row."""
        try:
            record = await db.get(GeneratedAudio, audio_id)
            if record is None:
                raise NotFoundError(resource="Audio file", resource_id=audio_id)
            await self.files.cleanup_file(record.file_path)
            await db.delete(record)
            await db.flush()
        except TourStackError:
            raise
        except Exception as e:
            logger.error("Database error deleting audio %s: %s", audio_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to delete audio file", context={"error": str(e)}) from e
        logger.info("Generated audio deleted: %s", audio_id)


# ── Singleton Instance ────────────────────────────────────────────────────
tts_service = GoogleTTSService(
    api_key=settings.google_vision_api_key,
    referer=settings.google_api_referer,
    cache_ttl=settings.tts_voice_cache_ttl,
)
