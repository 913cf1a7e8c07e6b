"""
TourStack Backend — Google Translate Proxy
============================================

What:  Translation, batch translation, language detection and the list of
       supported languages, via Google Cloud Translation v2.
Why:   The API key must stay on the server; the editor's "Magic Translate"
       button calls these endpoints instead of Google directly.
How:   Thin wrapper over GoogleAPIClient. Inputs are validated first, so a
       request missing text or target language never leaves the server.
Who:   /api/google-translate routes.

Upstream request body:
    {"q": "Hello" | ["Hello", "Bye"], "target": "fr", "format": "text", "source"?: "en"}
`source` is omitted for auto-detection (sourceLang absent or "auto").
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from tourstack.config import settings
from tourstack.exceptions import TourStackError, UpstreamError, ValidationError
from tourstack.schemas.google import (
    BatchTranslateRequest,
    BatchTranslateResponse,
    DetectRequest,
    DetectResponse,
    Language,
    LanguagesResponse,
    TranslateRequest,
    TranslateResponse,
    TranslateStatus,
    Translation,
)
from tourstack.services.google_client import GoogleAPIClient

logger = logging.getLogger(__name__)

TRANSLATE_API_URL = "https://translation.googleapis.com/language/translate/v2"


class GoogleTranslateService(GoogleAPIClient):
    service_name = "Google Translate API"

    def __init__(
        self,
        api_key: str,
        referer: str,
        base_url: str = TRANSLATE_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key=api_key, base_url=base_url, referer=referer, transport=transport)

    @staticmethod
    def _body(q: Any, target: str, fmt: str, source: Optional[str]) -> Dict[str, Any]:
        body: Dict[str, Any] = {"q": q, "target": target, "format": fmt}
        if source and source != "auto":
            body["source"] = source
        return body

    async def translate(self, data: TranslateRequest) -> TranslateResponse:
        if not data.text:
            raise ValidationError(message="Text is required", field="text")
        if not data.target_lang:
            raise ValidationError(message="Target language is required", field="targetLang")

        payload = await self.request(
            "POST", json=self._body(data.text, data.target_lang, data.format, data.source_lang)
        )
        translations = (payload.get("data") or {}).get("translations") or []
        if not translations:
            raise TourStackError(message="No translation returned")

        first = translations[0]
        logger.debug("Translated %d chars to %s", len(data.text), data.target_lang)
        return TranslateResponse(
            translated_text=first.get("translatedText", ""),
            detected_source_language=first.get("detectedSourceLanguage"),
        )

    async def translate_batch(self, data: BatchTranslateRequest) -> BatchTranslateResponse:
        if not data.texts:
            raise ValidationError(message="Texts array is required", field="texts")
        if not data.target_lang:
            raise ValidationError(message="Target language is required", field="targetLang")

        payload = await self.request(
            "POST", json=self._body(data.texts, data.target_lang, data.format, data.source_lang)
        )
        translations = (payload.get("data") or {}).get("translations")
        if translations is None:
            raise TourStackError(message="No translations returned")

        logger.info("Batch translated %d texts to %s", len(data.texts), data.target_lang)
        return BatchTranslateResponse(translations=[
            Translation(
                translated_text=t.get("translatedText", ""),
                detected_source_language=t.get("detectedSourceLanguage"),
            )
            for t in translations
        ])

    async def detect(self, data: DetectRequest) -> DetectResponse:
        if not data.text:
            raise ValidationError(message="Text is required", field="text")

        payload = await self.request("POST", "/detect", json={"q": data.text})
        detections = (payload.get("data") or {}).get("detections") or []
        if not detections or not detections[0]:
            raise TourStackError(message="No detection result")

        best = detections[0][0]
        return DetectResponse(language=best["language"], confidence=best.get("confidence"))

    async def _languages(self, target: str) -> List[Dict[str, Any]]:
        payload = await self.request("GET", "/languages", params={"target": target})
        languages = (payload.get("data") or {}).get("languages")
        if languages is None:
            raise TourStackError(message="No languages returned")
        return languages

    async def languages(self, target: str = "en") -> LanguagesResponse:
        """Supported languages, names localized into `target`."""
        languages = await self._languages(target)
        return LanguagesResponse(languages=[
            Language(code=l["language"], name=l.get("name") or l["language"])
            for l in languages
        ])

    async def status(self) -> TranslateStatus:
        """Whether the key works. Never raises."""
        if not self.configured:
            return TranslateStatus(available=False, reason="GOOGLE_VISION_API_KEY not configured")
        try:
            languages = await self._languages("en")
        except UpstreamError as e:
            return TranslateStatus(available=False, reason=e.message)
        except TourStackError:
            return TranslateStatus(available=False, reason="Failed to connect to Google Translate API")
        return TranslateStatus(available=True, language_count=len(languages))


# ── Singleton Instance ────────────────────────────────────────────────────
translate_service = GoogleTranslateService(
    api_key=settings.google_vision_api_key,
    referer=settings.google_api_referer,
)
