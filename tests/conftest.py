"""Shared fixtures.

MongoDB is replaced by mongomock-motor behind a real ``init_beanie`` call, and
the Google Calendar gateway and SMTP mailer are mocks, so no test needs the
network.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from app import database
from app.auth.jwt import create_access_token, get_password_hash
from app.config import settings
from app.dependencies import ServiceContainer
from app.main import create_app
from app.models.admin import Admin
from app.services.calendar_service import CalendarEventResult, GoogleCalendarManager
from app.services.email_service import DeliveryInfo, EmailService
from app.services.token_store import TokenStore

ADMIN_EMAIL = "admin@acme.io"
ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    """Deterministic configuration regardless of the developer's .env"""
    monkeypatch.setattr(settings, "ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", ADMIN_PASSWORD)
    monkeypatch.setattr(settings, "DEFAULT_TIMEZONE", "Asia/Kolkata")
    monkeypatch.setattr(settings, "DEFAULT_MEETING_DURATION", 30)
    monkeypatch.setattr(settings, "JWT_SECRET", "test-secret")
    return settings


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncMongoMockClient, None]:
    """Fresh in-memory database with all document models initialized"""
    client = AsyncMongoMockClient()
    await database.init_db(client)
    yield client
    database._client = None


@pytest.fixture
def token_store(tmp_path) -> TokenStore:
    return TokenStore(str(tmp_path / "tokens.json"))


@pytest.fixture
def calendar() -> MagicMock:
    """Calendar gateway that creates events successfully"""
    mock = MagicMock(spec=GoogleCalendarManager)
    mock.create_event = AsyncMock(
        return_value=CalendarEventResult(
            event_id="evt-123",
            hangout_link="https://meet.google.com/abc-defg-hij",
            html_link="https://www.google.com/calendar/event?eid=evt-123",
        )
    )
    mock.delete_event = AsyncMock(return_value=True)
    mock.revoke = AsyncMock(return_value=True)
    mock.exchange_code_for_tokens = AsyncMock(return_value={"access_token": "a"})
    mock.status.return_value = {
        "googleLinked": True,
        "hasAccessToken": True,
        "hasRefreshToken": True,
        "expiryDate": None,
    }
    return mock


@pytest.fixture
def mailer() -> MagicMock:
    mock = MagicMock(spec=EmailService)

    async def _send(recipients, subject, html):
        return DeliveryInfo(message_id="<msg-1@test>", recipients=list(recipients))

    mock.send = AsyncMock(side_effect=_send)
    mock.verify = AsyncMock(return_value=True)
    mock.transport_info.return_value = {
        "usingEmailUser": True,
        "hasAppPass": True,
        "hasOauth": False,
    }
    return mock


@pytest.fixture
def container(token_store, calendar, mailer) -> ServiceContainer:
    return ServiceContainer(
        config=settings,
        token_store=token_store,
        calendar=calendar,
        mailer=mailer,
    )


@pytest_asyncio.fixture
async def client(db, container) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app; startup is done by the db fixture"""
    application = create_app(container, run_startup=False)
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def admin(db) -> Admin:
    admin = Admin(email=ADMIN_EMAIL, passwordHash=get_password_hash(ADMIN_PASSWORD), name="Admin")
    await admin.insert()
    return admin


@pytest.fixture
def auth_headers(admin) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(admin.id))}"}
