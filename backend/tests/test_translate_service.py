"""
TourStack Backend — Google Translate Proxy Tests
==================================================

What:  Request shape, validation-before-network, error relay and status.
How:   GoogleTranslateService talks to a RecordingTransport instead of Google.
"""

import json

import httpx
import pytest

from tourstack.exceptions import TourStackError, UpstreamError, ValidationError
from tourstack.schemas.google import BatchTranslateRequest, DetectRequest, TranslateRequest
from tourstack.services.translate_service import GoogleTranslateService

REFERER = "http://localhost:3000"


def _translations(*texts):
    return httpx.Response(200, json={"data": {"translations": [
        {"translatedText": t, "detectedSourceLanguage": "en"} for t in texts
    ]}})


class TestTranslate:

    @pytest.mark.asyncio
    async def test_translate_sends_key_referer_and_body(self, recording_transport):
        transport = recording_transport(lambda req: _translations("Bonjour"))
        service = GoogleTranslateService("secret", REFERER, transport=transport)

        result = await service.translate(TranslateRequest(text="Hello", target_lang="fr", source_lang="en"))

        assert result.translated_text == "Bonjour"
        assert result.detected_source_language == "en"
        [request] = transport.requests
        assert request.method == "POST"
        assert request.url.params["key"] == "secret"
        assert request.headers["Referer"] == REFERER
        assert json.loads(request.content) == {"q": "Hello", "target": "fr", "format": "text", "source": "en"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("source", [None, "auto"])
    async def test_auto_detect_omits_source(self, recording_transport, source):
        transport = recording_transport(lambda req: _translations("Hola"))
        service = GoogleTranslateService("secret", REFERER, transport=transport)

        await service.translate(TranslateRequest(text="Hello", target_lang="es", source_lang=source))

        assert "source" not in json.loads(transport.requests[0].content)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "request_data, message",
        [
            (TranslateRequest(target_lang="fr"), "Text is required"),
            (TranslateRequest(text="", target_lang="fr"), "Text is required"),
            (TranslateRequest(text="Hello"), "Target language is required"),
        ],
    )
    async def test_validation_happens_before_any_call(self, recording_transport, request_data, message):
        transport = recording_transport(lambda req: _translations("x"))
        service = GoogleTranslateService("secret", REFERER, transport=transport)

        with pytest.raises(ValidationError, match=message):
            await service.translate(request_data)
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_upstream_error_relayed(self, recording_transport, google_error):
        transport = recording_transport(lambda req: google_error(403, "Requests from this referer are blocked."))
        service = GoogleTranslateService("secret", REFERER, transport=transport)

        with pytest.raises(UpstreamError) as exc_info:
            await service.translate(TranslateRequest(text="Hello", target_lang="fr"))

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Requests from this referer are blocked."
        assert exc_info.value.details["code"] == 403

    @pytest.mark.asyncio
    async def test_empty_translation_list(self, recording_transport):
        transport = recording_transport(lambda req: httpx.Response(200, json={"data": {"translations": []}}))
        service = GoogleTranslateService("secret", REFERER, transport=transport)

        with pytest.raises(TourStackError, match="No translation returned"):
            await service.translate(TranslateRequest(text="Hello", target_lang="fr"))

    @pytest.mark.asyncio
    async def test_connection_failure_is_502(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = GoogleTranslateService("secret", REFERER, transport=httpx.MockTransport(refuse))
        with pytest.raises(UpstreamError) as exc_info:
            await service.translate(TranslateRequest(text="Hello", target_lang="fr"))
        assert exc_info.value.status_code == 502


class TestBatchAndDetect:

    @pytest.mark.asyncio
    async def test_batch_keeps_order(self, recording_transport):
        transport = recording_transport(lambda req: _translations("Un", "Deux"))
        service = GoogleTranslateService("secret", REFERER, transport=transport)

        result = await service.translate_batch(BatchTranslateRequest(texts=["One", "Two"], target_lang="fr"))

        assert [t.translated_text for t in result.translations] == ["Un", "Deux"]
        assert json.loads(transport.requests[0].content)["q"] == ["One", "Two"]

    @pytest.mark.asyncio
    async def test_batch_requires_texts(self, recording_transport):
        transport = recording_transport(lambda req: _translations())
        service = GoogleTranslateService("secret", REFERER, transport=transport)

        with pytest.raises(ValidationError, match="Texts array is required"):
            await service.translate_batch(BatchTranslateRequest(texts=[], target_lang="fr"))
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_detect(self, recording_transport):
        transport = recording_transport(lambda req: httpx.Response(200, json={
            "data": {"detections": [[{"language": "de", "confidence": 0.98, "isReliable": False}]]}
        }))
        service = GoogleTranslateService("secret", REFERER, transport=transport)

        result = await service.detect(DetectRequest(text="Guten Tag"))

        assert result.language == "de"
        assert result.confidence == 0.98
        assert transport.requests[0].url.path.endswith("/detect")


class TestLanguagesAndStatus:

    @pytest.mark.asyncio
    async def test_languages_localized(self, recording_transport):
        transport = recording_transport(lambda req: httpx.Response(200, json={
            "data": {"languages": [{"language": "fr", "name": "Französisch"}]}
        }))
        service = GoogleTranslateService("secret", REFERER, transport=transport)

        result = await service.languages("de")

        assert result.languages[0].code == "fr"
        assert result.languages[0].name == "Französisch"
        assert transport.requests[0].url.params["target"] == "de"

    @pytest.mark.asyncio
    async def test_status_available(self, recording_transport):
        transport = recording_transport(lambda req: httpx.Response(200, json={
            "data": {"languages": [{"language": "fr"}, {"language": "de"}]}
        }))
        service = GoogleTranslateService("secret", REFERER, transport=transport)

        status = await service.status()

        assert status.available is True
        assert status.language_count == 2

    @pytest.mark.asyncio
    async def test_status_without_key_makes_no_call(self, recording_transport):
        transport = recording_transport(lambda req: _translations())
        service = GoogleTranslateService("", REFERER, transport=transport)

        status = await service.status()

        assert status.available is False
        assert status.reason == "GOOGLE_VISION_API_KEY not configured"
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_status_with_rejected_key(self, recording_transport, google_error):
        transport = recording_transport(lambda req: google_error(400, "API key not valid."))
        service = GoogleTranslateService("bad", REFERER, transport=transport)

        status = await service.status()

        assert status.available is False
        assert status.reason == "API key not valid."


class TestTranslateRoutes:

    @pytest.mark.asyncio
    async def test_missing_text_is_400(self, test_client):
        response = await test_client.post("/api/google-translate", json={"targetLang": "fr"})
        assert response.status_code == 400
        assert response.json() == {"error": "Text is required"}

    @pytest.mark.asyncio
    async def test_upstream_status_relayed_over_http(self, test_client, recording_transport, google_error):
        from tourstack.main import app
        from tourstack.routes.google_translate import get_translate_service

        transport = recording_transport(lambda req: google_error(429, "Quota exceeded."))
        app.dependency_overrides[get_translate_service] = lambda: GoogleTranslateService(
            "secret", REFERER, transport=transport
        )

        response = await test_client.post("/api/google-translate", json={"text": "Hello", "targetLang": "fr"})

        assert response.status_code == 429
        assert response.json()["error"] == "Quota exceeded."
        assert response.json()["details"]["code"] == 429
