"""
TourStack Backend — Media Library Tests
=========================================

Uploads go through the real FileService singleton, which conftest roots in
a temporary directory; metadata lands in the per-test SQLite database.
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from tourstack.exceptions import DatabaseError
from tourstack.services.file_service import file_service
from tourstack.services.media_service import media_service


async def _upload(client, data: bytes, filename: str = "vase.png", mime_type: str = "image/png", **form) -> dict:
    response = await client.post("/api/media", files={"file": (filename, data, mime_type)}, data=form)
    assert response.status_code == 201, response.text
    return response.json()


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_records_metadata(self, test_client, sample_png_bytes):
        media = await _upload(
            test_client,
            sample_png_bytes,
            alt="Blue vase",
            caption="Ming dynasty",
            tags='["vase", "ceramics"]',
            width="640",
            height="480",
        )

        assert media["filename"] == "vase.png"
        assert media["mimeType"] == "image/png"
        assert media["size"] == len(sample_png_bytes)
        assert media["url"].startswith("/uploads/images/") and media["url"].endswith(".png")
        assert media["alt"] == "Blue vase"
        assert media["tags"] == ["vase", "ceramics"]
        assert media["width"] == 640 and media["height"] == 480
        assert file_service.path_for(media["url"]).read_bytes() == sample_png_bytes

    @pytest.mark.asyncio
    async def test_audio_goes_to_audio_directory(self, test_client):
        media = await _upload(test_client, b"ID3\x03", filename="intro.mp3", mime_type="audio/mpeg", duration="12.5")
        assert media["url"].startswith("/uploads/audio/")
        assert media["duration"] == 12.5
        assert media["tags"] == []

    @pytest.mark.asyncio
    async def test_rejected_type(self, test_client):
        response = await test_client.post(
            "/api/media",
            files={"file": ("page.html", b"<html>", "text/html")},
        )
        assert response.status_code == 400
        assert "not allowed" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_invalid_tags(self, test_client, sample_png_bytes):
        response = await test_client.post(
            "/api/media",
            files={"file": ("a.png", sample_png_bytes, "image/png")},
            data={"tags": "not-json"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid tags"}

    @pytest.mark.asyncio
    async def test_missing_file(self, test_client):
        response = await test_client.post("/api/media", data={"alt": "nothing"})
        assert response.status_code == 400
        assert response.json() == {"error": "No file uploaded"}

    @pytest.mark.asyncio
    async def test_quick_upload_creates_no_row(self, test_client, sample_png_bytes):
        response = await test_client.post(
            "/api/media/upload",
            files={"file": ("inline.png", sample_png_bytes, "image/png")},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["url"].startswith("/uploads/images/")
        assert body["mimeType"] == "image/png"
        assert (await test_client.get("/api/media")).json() == []


class TestEditing:

    @pytest.mark.asyncio
    async def test_update_metadata(self, test_client, sample_png_bytes):
        media = await _upload(test_client, sample_png_bytes)
        response = await test_client.put(f"/api/media/{media['id']}", json={"alt": "Updated", "tags": ["x"]})
        assert response.status_code == 200
        assert response.json()["alt"] == "Updated"
        assert response.json()["tags"] == ["x"]

    @pytest.mark.asyncio
    async def test_bulk_tags_add_merges(self, test_client, sample_png_bytes):
        a = await _upload(test_client, sample_png_bytes, tags='["vase"]')
        b = await _upload(test_client, sample_png_bytes)

        response = await test_client.put(
            "/api/media/bulk/tags",
            json={"ids": [a["id"], b["id"]], "tags": ["vase", "ming"], "mode": "add"},
        )
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert (await test_client.get(f"/api/media/{a['id']}")).json()["tags"] == ["vase", "ming"]
        assert (await test_client.get(f"/api/media/{b['id']}")).json()["tags"] == ["vase", "ming"]

    @pytest.mark.asyncio
    async def test_bulk_tags_replace(self, test_client, sample_png_bytes):
        a = await _upload(test_client, sample_png_bytes, tags='["old", "stale"]')
        await test_client.put("/api/media/bulk/tags", json={"ids": [a["id"]], "tags": ["new"], "mode": "replace"})
        assert (await test_client.get(f"/api/media/{a['id']}")).json()["tags"] == ["new"]

    @pytest.mark.asyncio
    async def test_bulk_tags_requires_ids(self, test_client):
        response = await test_client.put("/api/media/bulk/tags", json={"ids": [], "tags": ["x"]})
        assert response.status_code == 400
        assert response.json() == {"error": "No IDs provided"}

    @pytest.mark.asyncio
    async def test_bulk_tags_requires_tags(self, test_client):
        response = await test_client.put("/api/media/bulk/tags", json={"ids": ["a"]})
        assert response.status_code == 400
        assert response.json() == {"error": "No tags provided"}


class TestUsage:

    @pytest.mark.asyncio
    async def test_usage_finds_tours_and_stops(self, test_client, sample_png_bytes):
        media = await _upload(test_client, sample_png_bytes)
        url = media["url"]

        await test_client.post("/api/templates", json={"name": "QR Code"})
        tour = (await test_client.post("/api/tours", json={"title": {"en": "Asia"}, "heroImage": url})).json()
        image_stop = (await test_client.post(
            "/api/stops", json={"tourId": tour["id"], "title": {"en": "Vase"}, "image": {"url": url}}
        )).json()
        content_stop = (await test_client.post(
            "/api/stops",
            json={"tourId": tour["id"], "title": {"en": "Story"}, "content": [{"type": "image", "data": {"url": url}}]},
        )).json()
        await test_client.post("/api/stops", json={"tourId": tour["id"], "title": {"en": "Unrelated"}})

        response = await test_client.get(f"/api/media/{media['id']}/usage")
        assert response.status_code == 200
        body = response.json()

        assert [t["id"] for t in body["tours"]] == [tour["id"]]
        assert body["tours"][0]["usageType"] == "heroImage"
        usage = {s["id"]: s for s in body["stops"]}
        assert set(usage) == {image_stop["id"], content_stop["id"]}
        assert usage[image_stop["id"]]["usageType"] == "image"
        assert usage[content_stop["id"]]["usageType"] == "content"
        assert usage[content_stop["id"]]["tourTitle"] == {"en": "Asia"}

    @pytest.mark.asyncio
    async def test_usage_unknown_media_404(self, test_client):
        response = await test_client.get("/api/media/missing/usage")
        assert response.status_code == 404
        assert response.json() == {"error": "Media not found"}


class TestDeletion:

    @pytest.mark.asyncio
    async def test_delete_removes_file_and_row(self, test_client, sample_png_bytes):
        media = await _upload(test_client, sample_png_bytes)
        path = file_service.path_for(media["url"])

        response = await test_client.delete(f"/api/media/{media['id']}")
        assert response.status_code == 204
        assert not path.exists()
        assert (await test_client.get(f"/api/media/{media['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_with_file_already_gone(self, test_client, sample_png_bytes):
        media = await _upload(test_client, sample_png_bytes)
        file_service.path_for(media["url"]).unlink()

        response = await test_client.delete(f"/api/media/{media['id']}")
        assert response.status_code == 204

    @pytest.mark.asyncio
    async def test_bulk_delete(self, test_client, sample_png_bytes):
        a = await _upload(test_client, sample_png_bytes)
        b = await _upload(test_client, sample_png_bytes)
        keep = await _upload(test_client, sample_png_bytes)

        response = await test_client.request("DELETE", "/api/media/bulk", json={"ids": [a["id"], b["id"], "missing"]})
        assert response.status_code == 204
        remaining = [m["id"] for m in (await test_client.get("/api/media")).json()]
        assert remaining == [keep["id"]]

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_file(self, test_client, session_factory, sample_png_bytes):
        media = await _upload(test_client, sample_png_bytes)
        path = file_service.path_for(media["url"])

        async with session_factory() as session:
            with patch.object(session, "flush", AsyncMock(side_effect=RuntimeError("database is locked"))):
                with pytest.raises(DatabaseError):
                    await media_service.delete_media(session, media["id"])
            await session.rollback()

        assert path.exists()
        assert (await test_client.get(f"/api/media/{media['id']}")).status_code == 200

    @pytest.mark.asyncio
    async def test_failed_bulk_delete_keeps_files(self, test_client, session_factory, sample_png_bytes):
        a = await _upload(test_client, sample_png_bytes)
        b = await _upload(test_client, sample_png_bytes)

        async with session_factory() as session:
            with patch.object(session, "flush", AsyncMock(side_effect=RuntimeError("database is locked"))):
                with pytest.raises(DatabaseError):
                    await media_service.bulk_delete(session, [a["id"], b["id"]])
            await session.rollback()

        assert file_service.path_for(a["url"]).exists()
        assert file_service.path_for(b["url"]).exists()
        assert len((await test_client.get("/api/media")).json()) == 2

    @pytest.mark.asyncio
    async def test_bulk_delete_requires_ids(self, test_client):
        response = await test_client.request("DELETE", "/api/media/bulk", json={"ids": []})
        assert response.status_code == 400
        assert response.json() == {"error": "No IDs provided"}


class TestSync:

    @pytest.mark.asyncio
    async def test_sync_registers_unknown_files_once(self, test_client):
        file_service.ensure_directories()
        name = f"handmade-{uuid.uuid4()}.jpg"
        (file_service.uploads_root / "images" / name).write_bytes(b"\xff\xd8\xff")

        first = await test_client.post("/api/media/sync")
        assert first.status_code == 200
        assert first.json()["added"] >= 1
        assert first.json()["message"].startswith("Sync complete:")

        listed = {m["url"]: m for m in (await test_client.get("/api/media")).json()}
        assert listed[f"/uploads/images/{name}"]["mimeType"] == "image/jpeg"

        second = (await test_client.post("/api/media/sync")).json()
        assert second["added"] == 0
        assert second["skipped"] == first.json()["added"]
        assert second["errors"] == 0
