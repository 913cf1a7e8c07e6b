"""
TourStack Backend — Google Text-to-Speech Tests
=================================================

What:  Voice helpers, voice list filtering and caching, synthesis request
       shape, validation-before-network, concurrent generation and the
       generated-audio library.
How:   GoogleTTSService with a RecordingTransport and a FileService in
       tmp_path. Concurrent generation uses a stub session per call so the
       calls share nothing but the service.
"""

import asyncio
import base64
import json
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from tourstack.exceptions import NotFoundError, UpstreamError, ValidationError
from tourstack.schemas.google import GenerateAudioRequest, PreviewRequest
from tourstack.services.tts_service import (
    SAMPLE_TEXTS,
    GoogleTTSService,
    language_code_for,
    voice_display_name,
    voice_type,
)

REFERER = "http://localhost:3000"
AUDIO = b"ID3-fake-mp3-bytes"

VOICES = {"voices": [
    {"name": "en-US-Standard-A", "languageCodes": ["en-US"], "ssmlGender": "MALE", "naturalSampleRateHertz": 24000},
    {"name": "en-US-Neural2-D", "languageCodes": ["en-US"], "ssmlGender": "MALE", "naturalSampleRateHertz": 24000},
    {"name": "en-US-Wavenet-B", "languageCodes": ["en-US"], "ssmlGender": "MALE", "naturalSampleRateHertz": 24000},
    {"name": "fr-FR-Neural2-A", "languageCodes": ["fr-FR"], "ssmlGender": "FEMALE", "naturalSampleRateHertz": 24000},
    {"name": "xx-XX-Standard-A", "languageCodes": ["xx-XX"], "ssmlGender": "FEMALE", "naturalSampleRateHertz": 24000},
]}


def _google(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/voices"):
        return httpx.Response(200, json=VOICES)
    return httpx.Response(200, json={"audioContent": base64.b64encode(AUDIO).decode()})


def _stub_session():
    """AsyncSession stand-in that assigns id/created_at on flush like the database would."""
    added = []
    session = AsyncMock()
    session.add = MagicMock(side_effect=added.append)

    async def flush():
        for obj in added:
            obj.id = obj.id or str(uuid.uuid4())
            obj.created_at = obj.created_at or datetime.now(timezone.utc)

    session.flush = AsyncMock(side_effect=flush)
    return session


class TestVoiceHelpers:

    def test_voice_type(self):
        assert voice_type("en-US-Neural2-D") == "Neural2"
        assert voice_type("en-US-Standard-A") == "Standard"
        assert voice_type("en-US-StandardA") == "Standard"
        assert voice_type("bad") == "Unknown"

    def test_display_name(self):
        assert voice_display_name("en-US-Neural2-D") == "Neural2 D"
        assert voice_display_name("en-US-Standard") == "Standard"
        assert voice_display_name("plain") == "plain"

    def test_language_code(self):
        assert language_code_for("cmn-CN-Standard-A") == "cmn-CN"
        assert language_code_for("nolang") == "en-US"


class TestVoices:

    def setup_method(self):
        self.transport = None

    def _service(self, recording_transport, api_key="secret", cache_ttl=3600):
        self.transport = recording_transport(_google)
        return GoogleTTSService(api_key, REFERER, cache_ttl=cache_ttl, transport=self.transport)

    @pytest.mark.asyncio
    async def test_grouped_and_filtered(self, recording_transport):
        service = self._service(recording_transport)

        result = await service.voices()

        assert set(result.voices) == {"en", "fr"}
        assert [v.id for v in result.voices["en"]] == ["en-US-Neural2-D", "en-US-Standard-A"]
        assert result.voices["en"][0].display_name == "Neural2 D"
        assert result.language == "all"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("language", ["fr", "fr-FR"])
    async def test_language_filter(self, recording_transport, language):
        service = self._service(recording_transport)

        result = await service.voices(language)

        assert list(result.voices) == ["fr"]

    @pytest.mark.asyncio
    async def test_voice_list_cached(self, recording_transport):
        service = self._service(recording_transport)

        await service.voices()
        await service.languages()
        await service.status()

        assert len(self.transport.requests) == 1

    @pytest.mark.asyncio
    async def test_zero_ttl_disables_cache(self, recording_transport):
        service = self._service(recording_transport, cache_ttl=0)

        await service.voices()
        await service.voices()

        assert len(self.transport.requests) == 2

    @pytest.mark.asyncio
    async def test_languages_counts(self, recording_transport):
        service = self._service(recording_transport)

        languages = {l.code: l for l in await service.languages()}

        assert languages["en"].voice_count == 2
        assert languages["en"].google_code == "en-US"
        assert languages["fr"].name == "French"

    @pytest.mark.asyncio
    async def test_status_without_key(self, recording_transport):
        service = self._service(recording_transport, api_key="")

        status = await service.status()

        assert status.configured is False
        assert status.error == "Google API key not configured"
        assert self.transport.requests == []

    @pytest.mark.asyncio
    async def test_status_with_rejected_key(self, recording_transport, google_error):
        transport = recording_transport(lambda req: google_error(403, "The caller does not have permission"))
        service = GoogleTTSService("bad", REFERER, transport=transport)

        status = await service.status()

        assert status.configured is True
        assert status.valid is False
        assert status.error == "The caller does not have permission"


class TestGenerate:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data, message",
        [
            (GenerateAudioRequest(voice_id="en-US-Neural2-D"), "Text is required"),
            (GenerateAudioRequest(text="   ", voice_id="en-US-Neural2-D"), "Text is required"),
            (GenerateAudioRequest(text="Hello"), "Voice ID is required"),
            (GenerateAudioRequest(text="é" * 2501, voice_id="en-US-Neural2-D"), "exceeds Google TTS limit"),
        ],
    )
    async def test_validation_before_any_call(self, recording_transport, temp_uploads, data, message):
        transport = recording_transport(_google)
        service = GoogleTTSService("secret", REFERER, files=temp_uploads, transport=transport)

        with pytest.raises(ValidationError, match=message):
            await service.generate(_stub_session(), data)
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_synthesis_request_and_record(self, recording_transport, temp_uploads):
        transport = recording_transport(_google)
        service = GoogleTTSService("secret", REFERER, files=temp_uploads, transport=transport)

        record = await service.generate(_stub_session(), GenerateAudioRequest(
            text="  Welcome to the gallery.  ",
            voice_id="fr-FR-Neural2-A",
            encoding="OGG_OPUS",
            sample_rate=48000,
            speaking_rate=0.9,
        ))

        body = json.loads(transport.requests[0].content)
        assert body["input"] == {"text": "Welcome to the gallery."}
        assert body["voice"] == {"languageCode": "fr-FR", "name": "fr-FR-Neural2-A"}
        assert body["audioConfig"]["audioEncoding"] == "OGG_OPUS"
        assert body["audioConfig"]["sampleRateHertz"] == 48000

        assert record.file_path.startswith("audio/generated/") and record.file_path.endswith(".ogg")
        assert record.file_url == f"/uploads/{record.file_path}"
        assert record.file_size == len(AUDIO)
        assert record.name == "Google TTS - Neural2 A"
        assert record.text == "Welcome to the gallery."
        assert record.language_code == "fr-FR"
        assert (temp_uploads.uploads_root / record.file_path).read_bytes() == AUDIO

    @pytest.mark.asyncio
    async def test_concurrent_generations_get_distinct_files(self, recording_transport, temp_uploads):
        transport = recording_transport(_google)
        service = GoogleTTSService("secret", REFERER, files=temp_uploads, transport=transport)

        records = await asyncio.gather(*[
            service.generate(_stub_session(), GenerateAudioRequest(text=f"Stop {i}", voice_id="en-US-Neural2-D"))
            for i in range(5)
        ])

        paths = {r.file_path for r in records}
        assert len(paths) == 5
        assert len(transport.requests) == 5
        assert all((temp_uploads.uploads_root / p).is_file() for p in paths)

    @pytest.mark.asyncio
    async def test_missing_audio_content_is_502(self, recording_transport, temp_uploads):
        transport = recording_transport(lambda req: httpx.Response(200, json={}))
        service = GoogleTTSService("secret", REFERER, files=temp_uploads, transport=transport)

        with pytest.raises(UpstreamError) as exc_info:
            await service.generate(_stub_session(), GenerateAudioRequest(text="Hi", voice_id="en-US-Neural2-D"))
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "No audio content returned"
        assert list((temp_uploads.uploads_root / "audio" / "generated").iterdir()) == []

    @pytest.mark.asyncio
    async def test_database_failure_removes_file(self, recording_transport, temp_uploads):
        transport = recording_transport(_google)
        service = GoogleTTSService("secret", REFERER, files=temp_uploads, transport=transport)
        session = _stub_session()
        session.flush = AsyncMock(side_effect=RuntimeError("disk full"))

        with pytest.raises(Exception, match="Failed to save generated audio"):
            await service.generate(session, GenerateAudioRequest(text="Hi", voice_id="en-US-Neural2-D"))
        assert list((temp_uploads.uploads_root / "audio" / "generated").iterdir()) == []


class TestPreviewAndLibrary:

    @pytest.mark.asyncio
    async def test_preview_uses_language_sample(self, recording_transport):
        transport = recording_transport(_google)
        service = GoogleTTSService("secret", REFERER, transport=transport)

        audio = await service.preview(PreviewRequest(voice_id="fr-FR-Neural2-A"))

        assert audio == AUDIO
        body = json.loads(transport.requests[0].content)
        assert body["input"]["text"] == SAMPLE_TEXTS["fr"]
        assert body["audioConfig"] == {"audioEncoding": "MP3", "sampleRateHertz": 24000}

    @pytest.mark.asyncio
    async def test_preview_requires_voice(self, recording_transport):
        transport = recording_transport(_google)
        service = GoogleTTSService("secret", REFERER, transport=transport)

        with pytest.raises(ValidationError, match="Voice ID is required"):
            await service.preview(PreviewRequest())
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_list_and_delete(self, recording_transport, temp_uploads, db_session):
        transport = recording_transport(_google)
        service = GoogleTTSService("secret", REFERER, files=temp_uploads, transport=transport)

        record = await service.generate(db_session, GenerateAudioRequest(text="Hi", voice_id="en-US-Standard-A"))
        await db_session.commit()
        assert [r.id for r in await service.list_files(db_session)] == [record.id]

        await service.delete_file(db_session, record.id)
        await db_session.commit()
        assert await service.list_files(db_session) == []
        assert not (temp_uploads.uploads_root / record.file_path).exists()

    @pytest.mark.asyncio
    async def test_delete_unknown_file(self, temp_uploads, db_session):
        service = GoogleTTSService("secret", REFERER, files=temp_uploads)
        with pytest.raises(NotFoundError, match="Audio file not found"):
            await service.delete_file(db_session, "missing")


class TestTTSRoutes:

    @pytest.mark.asyncio
    async def test_formats(self, test_client):
        response = await test_client.get("/api/google-tts/formats")
        assert response.status_code == 200
        assert [f["id"] for f in response.json()["formats"]] == ["MP3", "LINEAR16", "OGG_OPUS"]
        assert any(r.get("default") for r in response.json()["sampleRates"])

    @pytest.mark.asyncio
    async def test_generate_requires_text(self, test_client):
        response = await test_client.post("/api/google-tts/generate", json={"voiceId": "en-US-Neural2-D"})
        assert response.status_code == 400
        assert response.json() == {"error": "Text is required"}

    @pytest.mark.asyncio
    async def test_text_limit_details(self, test_client):
        response = await test_client.post(
            "/api/google-tts/generate",
            json={"text": "a" * 5001, "voiceId": "en-US-Neural2-D"},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Text exceeds Google TTS limit (5001 bytes, max 5000)"
        assert "hint" in body["details"]
