"""Tests for SMTP delivery and transport resolution.

smtplib is mocked; nothing leaves the process.
"""

import smtplib
from email import message_from_string
from unittest.mock import patch

import pytest

from app.config import Settings
from app.errors import MailError
from app.models.settings import EmailTransportConfig
from app.schemas.settings import SettingsUpdate
from app.services.email_service import (
    EmailService,
    transport_from_config,
    transport_from_stored,
)
from app.services.settings_service import SettingsService


@pytest.fixture
def smtp_config():
    config = Settings()
    config.SMTP_SERVER = "smtp.acme.io"
    config.SMTP_PORT = 587
    config.SMTP_USERNAME = "bot@acme.io"
    config.SMTP_PASSWORD = "app-pass"
    config.SMTP_USE_TLS = True
    config.MAIL_FROM = ""
    config.GMAIL_OAUTH_CLIENT_ID = ""
    config.GMAIL_OAUTH_CLIENT_SECRET = ""
    config.GMAIL_OAUTH_REFRESH_TOKEN = ""
    return config


@pytest.fixture
def mock_smtp():
    with patch("app.services.email_service.smtplib.SMTP") as mock_smtp_cls:
        yield mock_smtp_cls


class TestTransportResolution:
    def test_from_config_password(self, smtp_config):
        transport = transport_from_config(smtp_config)

        assert transport.host == "smtp.acme.io"
        assert transport.use_starttls
        assert not transport.uses_oauth
        assert transport.sender == "bot@acme.io"

    def test_from_config_gmail_oauth(self, smtp_config):
        smtp_config.SMTP_PASSWORD = ""
        smtp_config.GMAIL_OAUTH_CLIENT_ID = "cid"
        smtp_config.GMAIL_OAUTH_CLIENT_SECRET = "csecret"
        smtp_config.GMAIL_OAUTH_REFRESH_TOKEN = "rtoken"

        transport = transport_from_config(smtp_config)

        assert transport.host == "smtp.gmail.com"
        assert transport.uses_oauth

    def test_from_config_unconfigured(self, smtp_config):
        smtp_config.SMTP_USERNAME = ""

        assert transport_from_config(smtp_config) is None

    def test_from_stored_gmail_service(self):
        transport = transport_from_stored(
            EmailTransportConfig(service="gmail", user="bot@acme.io", password="pw", secure=True)
        )

        assert transport.host == "smtp.gmail.com"
        assert transport.port == 465
        assert transport.use_ssl

    def test_from_stored_needs_credentials(self):
        assert transport_from_stored(EmailTransportConfig(service="gmail", user="bot@acme.io")) is None
        assert transport_from_stored(None) is None

    async def test_stored_transport_preferred(self, db, smtp_config):
        await SettingsService.update_settings(SettingsUpdate(
            emailTransport=EmailTransportConfig(host="mail.other.io", port=2525, user="u@other.io", password="pw")
        ))

        transport = await EmailService(smtp_config).resolve_transport()

        assert transport.host == "mail.other.io"
        assert transport.port == 2525

    async def test_missing_configuration(self, smtp_config):
        smtp_config.SMTP_USERNAME = ""

        with pytest.raises(MailError):
            await EmailService(smtp_config, use_stored_settings=False).resolve_transport()


class TestSend:
    async def test_single_message_to_all_recipients(self, smtp_config, mock_smtp):
        service = EmailService(smtp_config, use_stored_settings=False)

        info = await service.send(
            ["ann@x.com", "admin@acme.io", "ANN@x.com", ""], "Meeting Scheduled", "<p>hi</p>"
        )

        server = mock_smtp.return_value
        mock_smtp.assert_called_once_with("smtp.acme.io", 587, timeout=30)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("bot@acme.io", "app-pass")
        server.send_message.assert_called_once()
        server.quit.assert_called_once()

        msg = server.send_message.call_args.args[0]
        assert server.send_message.call_args.kwargs["to_addrs"] == ["ann@x.com", "admin@acme.io"]
        parsed = message_from_string(msg.as_string())
        assert parsed["To"] == "ann@x.com, admin@acme.io"
        assert parsed["Subject"] == "Meeting Scheduled"
        assert info.recipients == ["ann@x.com", "admin@acme.io"]
        assert info.message_id == parsed["Message-ID"]

    async def test_no_recipients(self, smtp_config, mock_smtp):
        with pytest.raises(MailError):
            await EmailService(smtp_config, use_stored_settings=False).send([None, ""], "s", "b")

        mock_smtp.assert_not_called()

    async def test_authentication_failure(self, smtp_config, mock_smtp):
        mock_smtp.return_value.login.side_effect = smtplib.SMTPAuthenticationError(535, b"bad")

        with pytest.raises(MailError, match="authentication failed"):
            await EmailService(smtp_config, use_stored_settings=False).send(["a@x.com"], "s", "b")

        mock_smtp.return_value.close.assert_called_once()

    async def test_connection_failure(self, smtp_config, mock_smtp):
        mock_smtp.side_effect = OSError("connection refused")

        with pytest.raises(MailError):
            await EmailService(smtp_config, use_stored_settings=False).send(["a@x.com"], "s", "b")

    async def test_ssl_transport(self, smtp_config):
        smtp_config.SMTP_USE_TLS = False
        smtp_config.SMTP_PORT = 465

        with patch("app.services.email_service.smtplib.SMTP_SSL") as mock_ssl:
            await EmailService(smtp_config, use_stored_settings=False).send(["a@x.com"], "s", "b")

        mock_ssl.assert_called_once_with("smtp.acme.io", 465, timeout=30)
        mock_ssl.return_value.starttls.assert_not_called()

    async def test_gmail_oauth_uses_xoauth2(self, smtp_config, mock_smtp):
        smtp_config.SMTP_PASSWORD = ""
        smtp_config.GMAIL_OAUTH_CLIENT_ID = "cid"
        smtp_config.GMAIL_OAUTH_CLIENT_SECRET = "csecret"
        smtp_config.GMAIL_OAUTH_REFRESH_TOKEN = "rtoken"

        with patch.object(EmailService, "_oauth_access_token", return_value="ya29.token"):
            await EmailService(smtp_config, use_stored_settings=False).send(["a@x.com"], "s", "b")

        server = mock_smtp.return_value
        server.login.assert_not_called()
        mechanism, authobject = server.auth.call_args.args
        assert mechanism == "XOAUTH2"
        assert authobject() == "user=bot@acme.io\1auth=Bearer ya29.token\1\1"


async def test_verify_opens_and_closes_connection(smtp_config, mock_smtp):
    assert await EmailService(smtp_config, use_stored_settings=False).verify() is True

    mock_smtp.return_value.login.assert_called_once()
    mock_smtp.return_value.quit.assert_called_once()
    mock_smtp.return_value.send_message.assert_not_called()


def test_transport_info_never_exposes_secrets(smtp_config):
    info = EmailService(smtp_config).transport_info()

    assert info == {"usingEmailUser": True, "hasAppPass": True, "hasOauth": False}
