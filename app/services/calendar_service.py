import asyncio
import logging
import os
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

# Google Calendar API
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.config import settings
from app.errors import CalendarError, ConfigurationError
from app.services.token_store import TokenStore

# Google may hand back a superset of the requested scopes
os.environ.setdefault("OAUTHLIB_RELAX_TOKEN_SCOPE", "1")

logger = logging.getLogger(__name__)

# Google Calendar API scopes
SCOPES = [
    'https://www.googleapis.com/auth/calendar',
    'https://www.googleapis.com/auth/calendar.events'
]

AUTH_URI = "https://accounts.google.com/o/oauth2/auth"
TOKEN_URI = "https://oauth2.googleapis.com/token"
REVOKE_URI = "https://oauth2.googleapis.com/revoke"


@dataclass
class CalendarEvent:
    """Data class for calendar events"""
    summary: str
    start_datetime: datetime
    end_datetime: datetime
    description: str = ""
    attendees: List[str] = field(default_factory=list)
    timezone: str = settings.DEFAULT_TIMEZONE
    send_updates: str = "all"  # all, externalOnly, none
    with_meet_link: bool = True


@dataclass
class CalendarEventResult:
    event_id: str
    hangout_link: Optional[str] = None
    html_link: Optional[str] = None


def _expiry_to_iso(expiry: Optional[datetime]) -> Optional[str]:
    if not expiry:
        return None
    # google-auth keeps expiry as naive UTC
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return expiry.isoformat()


def _expiry_from_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        expiry = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Ignoring unreadable token expiry: {value!r}")
        return None
    if expiry.tzinfo is not None:
        expiry = expiry.astimezone(timezone.utc).replace(tzinfo=None)
    return expiry


def credentials_to_tokens(creds: Credentials) -> Dict[str, Any]:
    return {
        "access_token": creds.token,
        "refresh_token": creds.refresh_token,
        "expiry": _expiry_to_iso(creds.expiry),
        "token_type": "Bearer",
        "scope": " ".join(creds.scopes) if creds.scopes else None,
    }


class GoogleCalendarManager:
    """Google Calendar gateway: event create/delete and the OAuth2 token lifecycle"""

    def __init__(
        self,
        token_store: TokenStore,
        client_id: str = None,
        client_secret: str = None,
        redirect_uri: str = None,
        calendar_id: str = None,
    ):
        self.token_store = token_store
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else settings.GOOGLE_CLIENT_SECRET
        self.redirect_uri = redirect_uri or settings.GOOGLE_REDIRECT_URI
        self.calendar_id = calendar_id or settings.GOOGLE_CALENDAR_ID

    # ── OAuth2 lifecycle ────────────────────────────────────────

    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def _build_flow(self) -> Flow:
        if not self.is_configured():
            raise ConfigurationError(
                "Missing Google OAuth credentials (GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET). "
                "Please set them and restart the server."
            )
        client_config = {
            "web": {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "auth_uri": AUTH_URI,
                "token_uri": TOKEN_URI,
                "redirect_uris": [self.redirect_uri],
            }
        }
        return Flow.from_client_config(
            client_config,
            scopes=SCOPES,
            redirect_uri=self.redirect_uri,
            autogenerate_code_verifier=False,
        )

    def load_tokens(self) -> Dict[str, Any]:
        return self.token_store.load()

    def get_auth_url(self) -> str:
        """Consent-screen URL requesting offline access"""
        flow = self._build_flow()
        auth_url, _state = flow.authorization_url(
            access_type="offline",
            prompt="consent",
            include_granted_scopes="true",
        )
        return auth_url

    async def exchange_code_for_tokens(self, code: str) -> Dict[str, Any]:
        """Trade an authorization code for tokens and persist them"""
        flow = self._build_flow()
        try:
            await asyncio.to_thread(flow.fetch_token, code=code)
        except Exception as e:
            raise CalendarError(f"Failed to exchange code for tokens: {e}") from e

        tokens = credentials_to_tokens(flow.credentials)
        async with self.token_store.lock:
            self.token_store.save(tokens)
        logger.info("✅ Google account linked")
        return self.token_store.tokens

    async def revoke(self) -> bool:
        """Best-effort server-side revoke; the local token file is always cleared"""
        revoked = False
        async with self.token_store.lock:
            token = self.token_store.get("refresh_token") or self.token_store.get("access_token")
            try:
                if token:
                    response = await asyncio.to_thread(
                        Request(),
                        url=REVOKE_URI,
                        method="POST",
                        body=urlencode({"token": token}),
                        headers={"content-type": "application/x-www-form-urlencoded"},
                    )
                    revoked = response.status == 200
                    if revoked:
                        logger.info("OAuth credentials revoked via API")
                    else:
                        logger.warning(f"Revoke via API returned HTTP {response.status}")
            except Exception as e:
                logger.warning(f"Revoke via API failed: {e}")
            finally:
                self.token_store.clear()
        return revoked

    def status(self) -> Dict[str, Any]:
        return self.token_store.info()

    async def get_credentials(self) -> Credentials:
        """Stored credentials, refreshed and re-persisted when the access token expired"""
        async with self.token_store.lock:
            tokens = self.token_store.tokens
            if not self.token_store.has_tokens():
                raise CalendarError("Google account not linked")

            creds = Credentials(
                token=tokens.get("access_token"),
                refresh_token=tokens.get("refresh_token"),
                token_uri=TOKEN_URI,
                client_id=self.client_id,
                client_secret=self.client_secret,
                scopes=SCOPES,
                expiry=_expiry_from_iso(tokens.get("expiry")),
            )
            if creds.valid:
                return creds

            if not creds.refresh_token:
                raise CalendarError("Google access token expired and no refresh token is stored")

            try:
                await asyncio.to_thread(creds.refresh, Request())
            except Exception as e:
                raise CalendarError(f"Failed to refresh Google credentials: {e}") from e

            self.token_store.save(credentials_to_tokens(creds))
            logger.info("🔄 Refreshed Google access token")
            return creds

    # ── Events ──────────────────────────────────────────────────

    def _event_body(self, event: CalendarEvent) -> Dict[str, Any]:
        event_body = {
            'summary': event.summary,
            'description': event.description,
            'start': {
                'dateTime': event.start_datetime.isoformat(),
                'timeZone': event.timezone,
            },
            'end': {
                'dateTime': event.end_datetime.isoformat(),
                'timeZone': event.timezone,
            },
            'reminders': {'useDefault': True},
        }

        # Add attendees
        if event.attendees:
            event_body['attendees'] = [{'email': email} for email in event.attendees]

        if event.with_meet_link:
            event_body['conferenceData'] = {
                'createRequest': {
                    'requestId': uuid.uuid4().hex,
                    'conferenceSolutionKey': {'type': 'hangoutsMeet'},
                }
            }
        return event_body

    @staticmethod
    def _meet_link(created: Dict[str, Any]) -> Optional[str]:
        if created.get('hangoutLink'):
            return created['hangoutLink']
        for entry in created.get('conferenceData', {}).get('entryPoints', []):
            if entry.get('entryPointType') == 'video':
                return entry.get('uri')
        return None

    async def create_event(self, event: CalendarEvent) -> CalendarEventResult:
        """Create a calendar event with a Meet conference; raises CalendarError"""
        creds = await self.get_credentials()
        event_body = self._event_body(event)

        def _insert() -> Dict[str, Any]:
            service = build('calendar', 'v3', credentials=creds, cache_discovery=False)
            return service.events().insert(
                calendarId=self.calendar_id,
                body=event_body,
                conferenceDataVersion=1,
                sendUpdates=event.send_updates,
            ).execute()

        try:
            created = await asyncio.to_thread(_insert)
        except HttpError as error:
            raise CalendarError(f"Error creating event: {error}") from error
        except Exception as e:
            raise CalendarError(f"Calendar request failed: {e}") from e

        if not created.get('id'):
            raise CalendarError("Calendar API returned an event without an id")

        logger.info(f"✅ Event created: {created['id']}")
        return CalendarEventResult(
            event_id=created['id'],
            hangout_link=self._meet_link(created),
            html_link=created.get('htmlLink'),
        )

    async def delete_event(self, event_id: str) -> bool:
        """Delete an event; False when the provider reports it already gone"""
        creds = await self.get_credentials()

        def _delete() -> None:
            service = build('calendar', 'v3', credentials=creds, cache_discovery=False)
            service.events().delete(calendarId=self.calendar_id, eventId=event_id).execute()

        try:
            await asyncio.to_thread(_delete)
        except HttpError as error:
            if error.resp is not None and error.resp.status in (404, 410):
                logger.info(f"Calendar event {event_id} already gone")
                return False
            raise CalendarError(f"Error deleting event: {error}") from error
        except Exception as e:
            raise CalendarError(f"Calendar request failed: {e}") from e

        logger.info(f"Calendar event deleted: {event_id}")
        return True
