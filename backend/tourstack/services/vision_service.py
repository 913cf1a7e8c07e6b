"""
TourStack Backend — Google Cloud Vision Proxy

POST /v1/images:annotate for a single base64 image. Label and web detection
are always requested on top of whatever features the editor asks for
(TEXT_DETECTION, OBJECT_LOCALIZATION, ...); the first (only) entry of
`responses` is returned unchanged.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from tourstack.config import settings
from tourstack.exceptions import UpstreamError, ValidationError
from tourstack.schemas.google import VisionAnalyzeRequest
from tourstack.services.google_client import GoogleAPIClient

logger = logging.getLogger(__name__)

VISION_API_URL = "https://vision.googleapis.com/v1"
ALWAYS_REQUESTED = ("LABEL_DETECTION", "WEB_DETECTION")


class VisionService(GoogleAPIClient):
    service_name = "Google Vision API"

    def __init__(
        self,
        api_key: str,
        referer: str,
        base_url: str = VISION_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key=api_key, base_url=base_url, referer=referer, transport=transport)

    async def analyze(self, data: VisionAnalyzeRequest) -> Dict[str, Any]:
        if not data.image:
            raise ValidationError(message="Image data is required (base64)", field="image")

        features = [{"type": f} for f in data.features]
        features.extend({"type": f} for f in ALWAYS_REQUESTED)

        payload = await self.request(
            "POST",
            "/images:annotate",
            json={"requests": [{"image": {"content": data.image}, "features": features}]},
        )
        responses = payload.get("responses") or []
        if not responses:
            raise UpstreamError(status_code=502, message="No analysis result", details=payload)

        result = responses[0]
        if isinstance(result.get("error"), dict):
            logger.error("Vision result error: %s", result["error"])
            raise ValidationError(
                message=result["error"].get("message") or "Image analysis failed",
                field="image",
            )

        logger.info("Vision analysis returned %d label(s)", len(result.get("labelAnnotations") or []))
        return result


# ── Singleton Instance ────────────────────────────────────────────────────
vision_service = VisionService(
    api_key=settings.google_vision_api_key,
    referer=settings.google_api_referer,
)
