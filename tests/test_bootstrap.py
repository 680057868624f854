"""Tests for the ordered startup sequence."""

import json

import pytest
from mongomock_motor import AsyncMongoMockClient

from app import database
from app.bootstrap import BootstrapStep, run_bootstrap, run_steps
from app.errors import MailError
from app.models.admin import Admin
from app.models.settings import AppSettings

STEP_NAMES = [
    "connect_database",
    "load_calendar_tokens",
    "ensure_admin",
    "ensure_settings",
    "verify_mail_transport",
]


@pytest.fixture(autouse=True)
def reset_client():
    yield
    database._client = None


@pytest.fixture
def linked_container(container, calendar):
    container.token_store.path.write_text(json.dumps({"refresh_token": "r1"}), encoding="utf-8")
    calendar.load_tokens.side_effect = container.token_store.load
    return container


async def test_runs_every_step_in_order(linked_container, mailer):
    report = await run_bootstrap(linked_container, AsyncMongoMockClient())

    assert [outcome.name for outcome in report.outcomes] == STEP_NAMES
    assert report.ok
    assert linked_container.token_store.has_tokens()
    mailer.verify.assert_awaited_once()


async def test_creates_admin_and_settings_from_environment(container):
    await run_bootstrap(container, AsyncMongoMockClient())

    admin = await Admin.find_one(Admin.email == "admin@acme.io")
    assert admin is not None
    settings_doc = await AppSettings.find_one()
    assert settings_doc.adminEmail == "admin@acme.io"


async def test_non_fatal_failure_does_not_stop_startup(container, mailer):
    mailer.verify.side_effect = MailError("Missing email configuration")

    report = await run_bootstrap(container, AsyncMongoMockClient())

    assert report.failed == ["verify_mail_transport"]
    assert report.outcome("verify_mail_transport").error == "Missing email configuration"
    assert report.outcome("ensure_settings").ok


async def test_unreadable_token_file_is_a_warning(container, calendar):
    container.token_store.path.write_text("not json", encoding="utf-8")
    calendar.load_tokens.side_effect = container.token_store.load

    report = await run_bootstrap(container, AsyncMongoMockClient())

    assert report.failed == ["load_calendar_tokens"]


async def test_fatal_failure_raises_and_stops():
    ran = []

    async def fail():
        raise RuntimeError("database unreachable")

    async def later():
        ran.append("later")

    with pytest.raises(RuntimeError):
        await run_steps([
            BootstrapStep("connect_database", fail, fatal=True),
            BootstrapStep("later", later),
        ])

    assert ran == []
