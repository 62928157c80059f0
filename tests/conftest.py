#!/usr/bin/env python3
"""
Pytest configuration and shared fixtures.

Every test gets its own in-memory SQLite database (aiosqlite + StaticPool so
all sessions share one connection), a BookingNotifier backed by
httpx.MockTransport, and an ASGI client with the app's resources overridden.
"""

import os
import sys

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.pool import StaticPool

# Add the project root to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

os.environ.setdefault("APP_ENV", "testing")

import app.db.base  # noqa: F401,E402  registers all models on Base.metadata
from app.core.config import Settings  # noqa: E402
from app.db.models.workshop import Workshop  # noqa: E402
from app.db.session import Database  # noqa: E402
from app.services.notifications import BookingNotifier  # noqa: E402

from mocks.vapi import NotificationRecorder, WEBHOOK_SECRET  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
BOOKING_SERVICE_URL = "http://booking.test"
WORKSHOP_NUMBER = "+15550001111"
INACTIVE_WORKSHOP_NUMBER = "+15550002222"


def make_settings(**overrides) -> Settings:
    values = {
        "APP_ENV": "testing",
        "DATABASE_URL": TEST_DATABASE_URL,
        "VAPI_WEBHOOK_SECRET": WEBHOOK_SECRET,
        "API_BASE_URL": "https://voice.test",
        "BOOKING_SERVICE_URL": BOOKING_SERVICE_URL,
        "WORKSHOP_TIMEZONE": "UTC",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def database():
    db = Database(TEST_DATABASE_URL, poolclass=StaticPool)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def notifications() -> NotificationRecorder:
    """Records booking notifications; set `.status_code` or `.error` to simulate failures."""
    return NotificationRecorder()


@pytest_asyncio.fixture
async def notifier(notifications):
    client = httpx.AsyncClient(transport=httpx.MockTransport(notifications))
    n = BookingNotifier(BOOKING_SERVICE_URL, client=client)
    yield n
    await n.aclose()


@pytest_asyncio.fixture
async def workshop(database) -> Workshop:
    """An active workshop plus an inactive one on a different number."""
    async with database.session() as db:
        active = Workshop(
            name="Precision Auto Repair",
            vapi_phone_number=WORKSHOP_NUMBER,
            business_hours={"mon-fri": "08:00-17:00", "sat": "09:00-13:00"},
            status="active",
        )
        inactive = Workshop(
            name="Closed Garage",
            vapi_phone_number=INACTIVE_WORKSHOP_NUMBER,
            status="inactive",
        )
        db.add_all([active, inactive])
        await db.commit()
        return active


@pytest_asyncio.fixture
async def client(database, notifier, test_settings):
    """ASGI client against the real app with test resources injected."""
    from app.api.deps import get_database, get_notifier, get_settings
    from app.main import app

    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_settings] = lambda: test_settings

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c

    app.dependency_overrides.clear()


# Pytest configuration hooks
def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line("markers", "essential: Core functionality tests")
    config.addinivalue_line("markers", "integration: Tests through the HTTP layer and the database")
    config.addinivalue_line("markers", "unit: Pure unit tests with no external dependencies")
