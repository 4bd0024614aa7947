"""
Shared fixtures.

The suite runs against a throw-away SQLite file. Settings are read from the
environment at import time, so the variables are set before the package is
imported.
"""

import os
import tempfile
from datetime import datetime
from zoneinfo import ZoneInfo

_tmp_dir = tempfile.mkdtemp(prefix="restaurant-backend-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmp_dir}/test.db"
os.environ["SHOP_TIMEZONE"] = "Europe/Berlin"
os.environ["OPENING_HOURS_ENFORCED"] = "true"
os.environ["FRONTEND_URL"] = "https://shop.example.com"
os.environ.pop("STRIPE_SECRET_KEY", None)
os.environ.pop("OPENING_HOURS", None)

import pytest
from httpx import ASGITransport, AsyncClient

from restaurant_backend.database import Base, async_session_maker, engine, init_db
from restaurant_backend.main import app, get_clock
from restaurant_backend.services.payment import get_checkout_service

BERLIN = ZoneInfo("Europe/Berlin")

# 2026-10-18 is a Sunday
SUNDAY_NOON = datetime(2026, 10, 18, 12, 0, tzinfo=BERLIN)
MONDAY_NOON = datetime(2026, 10, 19, 12, 0, tzinfo=BERLIN)
TUESDAY_NOON = datetime(2026, 10, 20, 12, 0, tzinfo=BERLIN)
TUESDAY_AFTERNOON = datetime(2026, 10, 20, 15, 0, tzinfo=BERLIN)


class FrozenClock:
    """Clock dependency whose time the test controls."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FrozenClock(TUESDAY_NOON)


@pytest.fixture
async def database():
    await init_db()
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(database):
    async with async_session_maker() as session:
        yield session


@pytest.fixture
async def client(database, clock):
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_checkout_service] = lambda: None

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def order_payload(**overrides) -> dict:
    payload = {
        "customer": {
            "name": "Erika Mustermann",
            "phone": "0151 2345678",
            "address": "Hauptstr. 1",
            "plz": "10115",
            "city": "Berlin",
        },
        "items": [
            {"id": 1, "name": "Pizza Margherita", "price": 10, "qty": 2},
            {"id": 2, "name": "Cola", "price": 5, "qty": 3, "note": "cold"},
        ],
        "payment": "cash",
    }
    payload.update(overrides)
    return payload
