"""Google Cloud Vision proxy."""

import json

import httpx
import pytest

from tourstack.exceptions import UpstreamError, ValidationError
from tourstack.schemas.google import VisionAnalyzeRequest
from tourstack.services.vision_service import VisionService

REFERER = "http://localhost:3000"


class TestVisionService:

    @pytest.mark.asyncio
    async def test_label_and_web_detection_always_requested(self, recording_transport):
        transport = recording_transport(lambda req: httpx.Response(200, json={
            "responses": [{"labelAnnotations": [{"description": "Vase", "score": 0.97}]}]
        }))
        service = VisionService("secret", REFERER, transport=transport)

        result = await service.analyze(VisionAnalyzeRequest(image="aGVsbG8=", features=["TEXT_DETECTION"]))

        assert result["labelAnnotations"][0]["description"] == "Vase"
        body = json.loads(transport.requests[0].content)
        [item] = body["requests"]
        assert item["image"] == {"content": "aGVsbG8="}
        assert [f["type"] for f in item["features"]] == ["TEXT_DETECTION", "LABEL_DETECTION", "WEB_DETECTION"]
        assert transport.requests[0].url.path.endswith("/images:annotate")

    @pytest.mark.asyncio
    async def test_image_required(self, recording_transport):
        transport = recording_transport(lambda req: httpx.Response(200, json={}))
        service = VisionService("secret", REFERER, transport=transport)

        with pytest.raises(ValidationError, match=r"Image data is required \(base64\)"):
            await service.analyze(VisionAnalyzeRequest())
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_empty_responses(self, recording_transport):
        transport = recording_transport(lambda req: httpx.Response(200, json={"responses": []}))
        service = VisionService("secret", REFERER, transport=transport)

        with pytest.raises(UpstreamError, match="No analysis result") as exc_info:
            await service.analyze(VisionAnalyzeRequest(image="aGVsbG8="))
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_per_image_error(self, recording_transport):
        transport = recording_transport(lambda req: httpx.Response(200, json={
            "responses": [{"error": {"code": 3, "message": "Bad image data."}}]
        }))
        service = VisionService("secret", REFERER, transport=transport)

        with pytest.raises(ValidationError, match="Bad image data."):
            await service.analyze(VisionAnalyzeRequest(image="aGVsbG8="))

    @pytest.mark.asyncio
    async def test_route_rejects_missing_image(self, test_client):
        response = await test_client.post("/api/vision/analyze", json={"features": []})
        assert response.status_code == 400
        assert response.json() == {"error": "Image data is required (base64)"}
