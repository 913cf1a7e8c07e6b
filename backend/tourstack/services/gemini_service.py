"""
TourStack Backend — Google Gemini Image Analysis
==================================================

What:  Catalog description of a museum image (description, tags, objects,
       visible text, colors, suggested title, mood, lighting, art style,
       estimated location) from Google Gemini.
Why:   Filling in alt text, captions and tags for a whole media library by
       hand is slow; the editor offers a one-click suggestion instead.
How:   Sends the prompt plus the inline image to a GenerativeModel configured
       for JSON output and parses the reply.
Who:   /api/gemini/analyze.

One attempt per request. A missing key is reported as a configuration
error before anything is sent.
"""

import base64
import binascii
import json
import logging
import time
import uuid
from typing import Any, Dict, Optional

import google.generativeai as genai

from tourstack.config import settings
from tourstack.exceptions import ConfigurationError, TourStackError, ValidationError
from tourstack.schemas.google import GeminiAnalyzeRequest

logger = logging.getLogger(__name__)


class GeminiService:
    """
    Google Gemini wrapper.

    Args:
        api_key:     GEMINI_API_KEY; empty disables the service.
        model_name:  e.g. "gemini-2.0-flash".
    """

    ANALYZE_PROMPT = """
Analyze this museum artifact/image and provide a strict JSON response with the following fields:

1. "description": A detailed, professional catalog description (2-3 sentences).
2. "tags": An array of 5-10 relevant strings (single words or short phrases).
3. "objects": An array of main objects identified in the image.
4. "text": Any text visible in the image (OCR). If none, output null.
5. "colors": An array of objects with "name" (string) and "hex" (string) for the dominant colors.
6. "suggestedTitle": A short, catchy title for the image.
7. "mood": The artistic mood (e.g., "Peaceful", "Melancholic").
8. "lighting": Lighting style (e.g., "Natural", "Studio").
9. "artStyle": The artistic style (e.g., "Modernism", "Realism").
10. "estimatedLocation": Predicted real-world location context (e.g., "Paris, France" or "Indoor Museum").

Ensure valid JSON output.
"""

    def __init__(self, api_key: str, model_name: str):
        self.api_key = api_key
        self.model_name = model_name
        self._model: Optional[Any] = None

        # The SDK keeps credentials in module-level state
        if api_key:
            genai.configure(api_key=api_key)
        else:
            logger.warning("GEMINI_API_KEY is not set. Gemini features will not work.")

    @property
    def model(self) -> Any:
        if self._model is None:
            self._model = genai.GenerativeModel(
                self.model_name,
                generation_config={"response_mime_type": "application/json"},
            )
        return self._model

    async def analyze_image(self, data: GeminiAnalyzeRequest) -> Dict[str, Any]:
        """
        Returns the parsed JSON object from the model.

        Raises:
            ValidationError:    no image (400)
            ConfigurationError: no API key (500)
            TourStackError:     reply is not JSON, or the SDK call failed (500)
        """
        if not data.image:
            raise ValidationError(message="No image data provided", field="image")
        if not self.api_key:
            raise ConfigurationError(message="Server configuration error: Gemini API Key missing")

        try:
            image_bytes = base64.b64decode(data.image)
        except (binascii.Error, ValueError) as e:
            raise ValidationError(message="Invalid base64 image data", field="image") from e

        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()
        logger.info("[%s] Gemini analysis started (%s, %d bytes)", request_id, data.mime_type, len(image_bytes))

        try:
            response = await self.model.generate_content_async([
                self.ANALYZE_PROMPT,
                {"mime_type": data.mime_type, "data": image_bytes},
            ])
            text = response.text
        except Exception as e:
            logger.error("[%s] Gemini API error: %s", request_id, str(e), exc_info=True)
            raise TourStackError(
                message="Failed to analyze image with Gemini",
                details=str(e),
                context={"request_id": request_id},
            ) from e

        try:
            result = json.loads(text)
        except ValueError as e:
            logger.error("[%s] Failed to parse Gemini JSON response: %s", request_id, text[:200])
            raise TourStackError(
                message="Failed to parse AI response",
                details={"raw": text},
                context={"request_id": request_id},
            ) from e

        logger.info("[%s] Gemini analysis completed in %.0fms", request_id, (time.time() - start_time) * 1000)
        return result


# ── Singleton Instance ────────────────────────────────────────────────────
gemini_service = GeminiService(
    api_key=settings.gemini_api_key,
    model_name=settings.gemini_model,
)
