from datetime import datetime

import pytest

from tests.conftest import BERLIN, MONDAY_NOON, TUESDAY_AFTERNOON


async def get_status(client):
    response = await client.get("/api/status")
    assert response.status_code == 200
    return response.json()


async def test_schedule_decides_without_override(client):
    status = await get_status(client)

    assert status == {"override": None, "open": True, "next_open": None}


async def test_closed_by_schedule_reports_next_opening(client, clock):
    clock.now = MONDAY_NOON

    status = await get_status(client)

    assert status["open"] is False
    assert datetime.fromisoformat(status["next_open"]) == datetime(2026, 10, 20, 11, 30, tzinfo=BERLIN)


async def test_force_closed(client):
    response = await client.post("/api/status", json={"status": "closed"})
    assert response.status_code == 200
    assert response.json() == {"success": True, "override": "closed"}

    status = await get_status(client)
    assert status["override"] == "closed"
    assert status["open"] is False
    assert status["next_open"] is None


async def test_force_open(client, clock):
    clock.now = TUESDAY_AFTERNOON
    await client.post("/api/status", json={"status": "open"})

    status = await get_status(client)
    assert status["override"] == "open"
    assert status["open"] is True


@pytest.mark.parametrize("body", [{"status": None}, {"status": ""}, {}])
async def test_clearing_override_returns_to_schedule(client, clock, body):
    clock.now = TUESDAY_AFTERNOON
    await client.post("/api/status", json={"status": "open"})

    response = await client.post("/api/status", json=body)
    assert response.status_code == 200
    assert response.json()["override"] is None

    status = await get_status(client)
    assert status["override"] is None
    assert status["open"] is False


async def test_clearing_without_body(client):
    await client.post("/api/status", json={"status": "closed"})

    response = await client.post("/api/status")
    assert response.status_code == 200
    assert (await get_status(client))["override"] is None


@pytest.mark.parametrize("value", ["maybe", "OPENED", 1, True])
async def test_invalid_override_is_rejected_without_change(client, value):
    await client.post("/api/status", json={"status": "closed"})

    response = await client.post("/api/status", json={"status": value})

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert (await get_status(client))["override"] == "closed"


async def test_last_write_wins(client):
    for value in ("open", "closed", "open"):
        await client.post("/api/status", json={"status": value})

    assert (await get_status(client))["override"] == "open"


async def test_health(client):
    response = await client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["database"] == "healthy"
