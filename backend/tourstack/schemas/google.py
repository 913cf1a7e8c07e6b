"""
TourStack Backend — External AI/Language Service Schemas
==========================================================

What:  Request/response contracts for the Google proxy endpoints
       (/api/google-translate, /api/google-tts, /api/vision, /api/gemini).

Required fields are declared Optional on purpose: presence is checked by
the services, which answer with the exact 400 message the editor shows
("Text is required", "Voice ID is required", ...) and do so before any
outbound call.
"""

from typing import Dict, List, Optional

from pydantic import Field

from tourstack.schemas.common import CamelModel, UTCDateTime


# ══════════════════════════════════════════════════════════════════════════
# Translate
# ══════════════════════════════════════════════════════════════════════════


class TranslateRequest(CamelModel):
    text: Optional[str] = None
    source_lang: Optional[str] = None
    target_lang: Optional[str] = None
    format: str = "text"


class BatchTranslateRequest(CamelModel):
    texts: Optional[List[str]] = None
    source_lang: Optional[str] = None
    target_lang: Optional[str] = None
    format: str = "text"


class DetectRequest(CamelModel):
    text: Optional[str] = None


class Translation(CamelModel):
    translated_text: str
    detected_source_language: Optional[str] = None


class TranslateResponse(Translation):
    provider: str = "google"


class BatchTranslateResponse(CamelModel):
    translations: List[Translation]
    provider: str = "google"


class DetectResponse(CamelModel):
    language: str
    confidence: Optional[float] = None


class Language(CamelModel):
    code: str
    name: str


class LanguagesResponse(CamelModel):
    languages: List[Language]


class TranslateStatus(CamelModel):
    available: bool
    reason: Optional[str] = None
    language_count: Optional[int] = None


# ══════════════════════════════════════════════════════════════════════════
# Text-to-Speech
# ══════════════════════════════════════════════════════════════════════════


class GenerateAudioRequest(CamelModel):
    text: Optional[str] = None
    voice_id: Optional[str] = None
    voice_name: Optional[str] = None
    encoding: str = "MP3"
    sample_rate: int = 24000
    speaking_rate: float = 1.0
    pitch: float = 0.0
    name: Optional[str] = None


class PreviewRequest(CamelModel):
    voice_id: Optional[str] = None
    text: Optional[str] = None


class GeneratedAudioResponse(CamelModel):
    id: str
    name: str
    text: str
    voice_id: str
    voice_name: str
    language_code: str
    encoding: str
    sample_rate: int
    file_path: str
    file_url: str
    file_size: int
    provider: str
    created_at: UTCDateTime


class Voice(CamelModel):
    id: str
    name: str
    display_name: str
    language_code: str
    ssml_gender: Optional[str] = None
    type: str
    natural_sample_rate_hertz: Optional[int] = None


class VoicesResponse(CamelModel):
    voices: Dict[str, List[Voice]]
    language: str


class TTSLanguage(CamelModel):
    code: str
    name: str
    google_code: str
    voice_count: int


class TTSStatus(CamelModel):
    configured: bool
    valid: Optional[bool] = None
    voice_count: Optional[int] = None
    error: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Vision & Gemini
# ══════════════════════════════════════════════════════════════════════════


class VisionAnalyzeRequest(CamelModel):
    image: Optional[str] = Field(default=None, description="Base64 image content")
    features: List[str] = Field(default_factory=list)


class GeminiAnalyzeRequest(CamelModel):
    image: Optional[str] = Field(default=None, description="Base64 image content")
    mime_type: str = "image/jpeg"
