"""
TourStack Backend — Stop Tests
================================

Stop creation (order, slug, QR positioning), partial updates, reorder
and deletion through /api/stops.
"""

import re

import pytest


async def _tour_id(client) -> str:
    await client.post("/api/templates", json={"name": "QR Code"})
    response = await client.post("/api/tours", json={"title": {"en": "Modern Art"}})
    return response.json()["id"]


async def _stop(client, tour_id: str, **fields) -> dict:
    response = await client.post("/api/stops", json={"tourId": tour_id, **fields})
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateStop:

    @pytest.mark.asyncio
    async def test_orders_are_sequential(self, test_client):
        tour_id = await _tour_id(test_client)
        stops = [await _stop(test_client, tour_id) for _ in range(3)]
        assert [s["order"] for s in stops] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_defaults_and_unique_slugs(self, test_client):
        tour_id = await _tour_id(test_client)
        first = await _stop(test_client, tour_id)
        second = await _stop(test_client, tour_id)

        assert first["title"] == {"en": "New Stop"}
        assert first["type"] == "mandatory"
        assert first["triggers"] == {"triggerOnEnter": True, "triggerOnExit": False}
        assert first["content"] == [] and first["contentBlocks"] == []
        assert [first["slug"], second["slug"]] == ["new-stop", "new-stop-1"]

    @pytest.mark.asyncio
    async def test_qr_positioning(self, test_client):
        tour_id = await _tour_id(test_client)
        stop = await _stop(test_client, tour_id, title={"en": "Water Lilies"})

        positioning = stop["primaryPositioning"]
        assert positioning["method"] == "qr_code"
        assert re.fullmatch(
            r"http://test/visitor/tour/modern-art/stop/water-lilies\?t=[a-z0-9]{8}",
            positioning["url"],
        )
        assert re.fullmatch(r"[A-HJ-NP-Z2-9]{6}", positioning["shortCode"])

    @pytest.mark.asyncio
    async def test_same_slug_allowed_in_other_tour(self, test_client):
        tour_a = await _tour_id(test_client)
        tour_b = (await test_client.post("/api/tours", json={"title": {"en": "Sculpture"}})).json()["id"]
        a = await _stop(test_client, tour_a, title={"en": "Lobby"})
        b = await _stop(test_client, tour_b, title={"en": "Lobby"})
        assert a["slug"] == b["slug"] == "lobby"

    @pytest.mark.asyncio
    async def test_requires_tour_id(self, test_client):
        response = await test_client.post("/api/stops", json={"title": {"en": "x"}})
        assert response.status_code == 400
        assert response.json() == {"error": "tourId is required"}

    @pytest.mark.asyncio
    async def test_unknown_tour_404(self, test_client):
        response = await test_client.post("/api/stops", json={"tourId": "missing"})
        assert response.status_code == 404
        assert response.json() == {"error": "Tour not found"}


class TestUpdateStop:

    @pytest.mark.asyncio
    async def test_content_blocks_replace_content(self, test_client):
        tour_id = await _tour_id(test_client)
        stop = await _stop(test_client, tour_id)
        blocks = [{"id": "b1", "type": "text", "data": {"content": {"en": "Hello"}}}]

        response = await test_client.put(
            f"/api/stops/{stop['id']}",
            json={"content": [{"id": "old"}], "contentBlocks": blocks},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["content"] == blocks
        assert body["contentBlocks"] == blocks

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self, test_client):
        tour_id = await _tour_id(test_client)
        stop = await _stop(test_client, tour_id, title={"en": "Lobby"}, description={"en": "Start here"})

        response = await test_client.put(f"/api/stops/{stop['id']}", json={"type": "optional"})
        body = response.json()
        assert body["type"] == "optional"
        assert body["title"] == {"en": "Lobby"}
        assert body["description"] == {"en": "Start here"}
        assert body["primaryPositioning"] == stop["primaryPositioning"]

    @pytest.mark.asyncio
    async def test_backup_positioning_can_be_cleared(self, test_client):
        tour_id = await _tour_id(test_client)
        stop = await _stop(test_client, tour_id, backupPositioning={"method": "gps", "lat": 1.5, "lng": 2.5})
        assert stop["backupPositioning"]["method"] == "gps"

        response = await test_client.put(f"/api/stops/{stop['id']}", json={"backupPositioning": None})
        assert response.json()["backupPositioning"] is None

    @pytest.mark.asyncio
    async def test_image_object_or_url(self, test_client):
        tour_id = await _tour_id(test_client)
        stop = await _stop(test_client, tour_id, image="/uploads/images/a.png")
        assert stop["image"] == "/uploads/images/a.png"

        image = {"url": "/uploads/images/b.png", "alt": {"en": "Vase"}}
        response = await test_client.put(f"/api/stops/{stop['id']}", json={"image": image})
        assert response.json()["image"] == image

        listed = (await test_client.get(f"/api/stops/{tour_id}")).json()
        assert listed[0]["image"] == image

    @pytest.mark.asyncio
    async def test_unknown_stop_404(self, test_client):
        response = await test_client.put("/api/stops/missing", json={"type": "optional"})
        assert response.status_code == 404
        assert response.json() == {"error": "Stop not found"}


class TestReorderAndDelete:

    @pytest.mark.asyncio
    async def test_reorder(self, test_client):
        tour_id = await _tour_id(test_client)
        a, b, c = [await _stop(test_client, tour_id, title={"en": t}) for t in ("A", "B", "C")]

        response = await test_client.put(
            f"/api/stops/reorder/{tour_id}",
            json={"stopIds": [c["id"], a["id"], b["id"]]},
        )
        assert response.status_code == 200
        assert [s["id"] for s in response.json()] == [c["id"], a["id"], b["id"]]
        assert [s["order"] for s in response.json()] == [0, 1, 2]

        tour = (await test_client.get(f"/api/tours/{tour_id}")).json()
        assert [s["title"]["en"] for s in tour["stops"]] == ["C", "A", "B"]

    @pytest.mark.asyncio
    async def test_reorder_unknown_stop_404(self, test_client):
        tour_id = await _tour_id(test_client)
        response = await test_client.put(f"/api/stops/reorder/{tour_id}", json={"stopIds": ["missing"]})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete(self, test_client):
        tour_id = await _tour_id(test_client)
        stop = await _stop(test_client, tour_id)

        response = await test_client.delete(f"/api/stops/{stop['id']}")
        assert response.status_code == 204
        assert (await test_client.get(f"/api/stops/{tour_id}")).json() == []
        assert (await test_client.delete(f"/api/stops/{stop['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_list_unknown_tour_is_empty(self, test_client):
        response = await test_client.get("/api/stops/missing")
        assert response.status_code == 200
        assert response.json() == []
