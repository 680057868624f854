import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Any, Dict, Iterable, List, Optional

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from app.config import Settings, settings
from app.errors import MailError, PersistenceError
from app.models.settings import EmailTransportConfig
from app.services.scheduling import RecipientSet
from app.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

GMAIL_SMTP_HOST = "smtp.gmail.com"
GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass
class SmtpTransport:
    host: str
    port: int
    user: Optional[str]
    password: Optional[str] = None
    use_ssl: bool = False
    use_starttls: bool = True
    from_address: Optional[str] = None
    oauth_client_id: Optional[str] = None
    oauth_client_secret: Optional[str] = None
    oauth_refresh_token: Optional[str] = None

    @property
    def uses_oauth(self) -> bool:
        return not self.password and bool(self.oauth_refresh_token)

    @property
    def sender(self) -> str:
        return self.from_address or self.user or "no-reply@example.com"


@dataclass
class DeliveryInfo:
    message_id: str
    recipients: List[str]


def transport_from_config(config: Settings) -> Optional[SmtpTransport]:
    """SMTP transport from environment settings, or None when unconfigured"""
    if config.SMTP_USERNAME and config.SMTP_PASSWORD:
        return SmtpTransport(
            host=config.SMTP_SERVER,
            port=config.SMTP_PORT,
            user=config.SMTP_USERNAME,
            password=config.SMTP_PASSWORD,
            use_ssl=not config.SMTP_USE_TLS,
            use_starttls=config.SMTP_USE_TLS,
            from_address=config.MAIL_FROM or None,
        )
    if (config.SMTP_USERNAME and config.GMAIL_OAUTH_CLIENT_ID
            and config.GMAIL_OAUTH_CLIENT_SECRET and config.GMAIL_OAUTH_REFRESH_TOKEN):
        return SmtpTransport(
            host=GMAIL_SMTP_HOST,
            port=587,
            user=config.SMTP_USERNAME,
            from_address=config.MAIL_FROM or None,
            oauth_client_id=config.GMAIL_OAUTH_CLIENT_ID,
            oauth_client_secret=config.GMAIL_OAUTH_CLIENT_SECRET,
            oauth_refresh_token=config.GMAIL_OAUTH_REFRESH_TOKEN,
        )
    return None


def transport_from_stored(stored: Optional[EmailTransportConfig]) -> Optional[SmtpTransport]:
    """SMTP transport from the admin-managed settings document"""
    if stored is None or not (stored.user and stored.password):
        return None
    host = stored.host or (GMAIL_SMTP_HOST if (stored.service or "gmail").lower() == "gmail" else None)
    if not host:
        return None
    port = stored.port or (465 if stored.secure else 587)
    return SmtpTransport(
        host=host,
        port=port,
        user=stored.user,
        password=stored.password,
        use_ssl=stored.secure,
        use_starttls=not stored.secure,
        from_address=stored.fromAddress,
    )


class EmailService:
    """Sends prepared HTML bodies over SMTP.

    One call addresses every recipient at once, so a booking costs a single
    SMTP session no matter how many people are notified.
    """

    def __init__(self, config: Settings = settings, use_stored_settings: bool = True):
        self.config = config
        self.use_stored_settings = use_stored_settings

    async def _stored_transport(self) -> Optional[SmtpTransport]:
        if not self.use_stored_settings:
            return None
        try:
            document = await SettingsService.get_settings()
        except PersistenceError as e:
            logger.warning(f"Could not read mail transport from settings: {e}")
            return None
        return transport_from_stored(document.emailTransport)

    async def resolve_transport(self) -> SmtpTransport:
        transport = await self._stored_transport() or transport_from_config(self.config)
        if transport is None:
            raise MailError(
                "Missing email configuration. Set SMTP_USERNAME and SMTP_PASSWORD "
                "or the GMAIL_OAUTH_* variables."
            )
        return transport

    def transport_info(self) -> Dict[str, Any]:
        return {
            "usingEmailUser": bool(self.config.SMTP_USERNAME),
            "hasAppPass": bool(self.config.SMTP_PASSWORD),
            "hasOauth": bool(
                self.config.GMAIL_OAUTH_CLIENT_ID
                and self.config.GMAIL_OAUTH_CLIENT_SECRET
                and self.config.GMAIL_OAUTH_REFRESH_TOKEN
            ),
        }

    @staticmethod
    def _oauth_access_token(transport: SmtpTransport) -> str:
        creds = Credentials(
            token=None,
            refresh_token=transport.oauth_refresh_token,
            token_uri=GOOGLE_TOKEN_URI,
            client_id=transport.oauth_client_id,
            client_secret=transport.oauth_client_secret,
        )
        creds.refresh(Request())
        return creds.token

    def _connect(self, transport: SmtpTransport) -> smtplib.SMTP:
        """Open and authenticate an SMTP session (blocking)"""
        if transport.use_ssl:
            server = smtplib.SMTP_SSL(transport.host, transport.port, timeout=30)
        else:
            server = smtplib.SMTP(transport.host, transport.port, timeout=30)
            if transport.use_starttls:
                server.starttls()

        try:
            if transport.uses_oauth:
                access_token = self._oauth_access_token(transport)
                auth_string = f"user={transport.user}\1auth=Bearer {access_token}\1\1"
                server.ehlo()
                server.auth("XOAUTH2", lambda challenge=None: auth_string)
            elif transport.user:
                server.login(transport.user, transport.password)
        except Exception:
            server.close()
            raise
        return server

    def _deliver(self, transport: SmtpTransport, msg: MIMEMultipart, recipients: List[str]) -> None:
        server = self._connect(transport)
        try:
            server.send_message(msg, from_addr=transport.sender, to_addrs=recipients)
        finally:
            server.quit()

    async def send(self, recipients: Iterable[str], subject: str, html: str) -> DeliveryInfo:
        """Send one HTML message addressed to every recipient; raises MailError"""
        to = RecipientSet(recipients).as_list()
        if not to:
            raise MailError("No recipients to send to")

        transport = await self.resolve_transport()

        # Create email message
        msg = MIMEMultipart("alternative")
        msg['From'] = transport.sender
        msg['To'] = ', '.join(to)
        msg['Subject'] = subject
        msg['Message-ID'] = make_msgid()
        msg.attach(MIMEText(html, 'html'))

        logger.info(f"Sending email to {len(to)} recipient(s) with subject: {subject}")
        try:
            await asyncio.to_thread(self._deliver, transport, msg, to)
        except smtplib.SMTPAuthenticationError as e:
            raise MailError("SMTP authentication failed. Please check your SMTP credentials.") from e
        except smtplib.SMTPRecipientsRefused as e:
            raise MailError(f"Failed to send email to some recipients: {e.recipients}") from e
        except (smtplib.SMTPException, OSError) as e:
            raise MailError(f"SMTP error: {e}") from e
        except Exception as e:
            raise MailError(f"Error sending email: {e}") from e

        logger.info(f"Email sent, messageId: {msg['Message-ID']}")
        return DeliveryInfo(message_id=msg['Message-ID'], recipients=to)

    async def verify(self) -> bool:
        """Open and authenticate a connection without sending anything"""
        transport = await self.resolve_transport()

        def _check() -> None:
            server = self._connect(transport)
            server.quit()

        try:
            await asyncio.to_thread(_check)
        except Exception as e:
            raise MailError(f"Failed to verify mail transport: {e}") from e
        logger.info("Mail transport verified")
        return True
