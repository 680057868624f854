"""Service wiring shared by the routers, bootstrap and tests."""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from app.config import Settings, settings
from app.services.booking_service import BookingService
from app.services.calendar_service import GoogleCalendarManager
from app.services.email_service import EmailService
from app.services.meeting_service import MeetingService
from app.services.token_store import TokenStore


@dataclass
class ServiceContainer:
    config: Settings
    token_store: TokenStore
    calendar: GoogleCalendarManager
    mailer: EmailService

    @classmethod
    def from_config(cls, config: Optional[Settings] = None) -> "ServiceContainer":
        config = config or settings
        token_store = TokenStore(config.GOOGLE_TOKEN_FILE)
        calendar = GoogleCalendarManager(
            token_store,
            client_id=config.GOOGLE_CLIENT_ID,
            client_secret=config.GOOGLE_CLIENT_SECRET,
            redirect_uri=config.GOOGLE_REDIRECT_URI,
            calendar_id=config.GOOGLE_CALENDAR_ID,
        )
        return cls(
            config=config,
            token_store=token_store,
            calendar=calendar,
            mailer=EmailService(config),
        )


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_calendar(container: ServiceContainer = Depends(get_container)) -> GoogleCalendarManager:
    return container.calendar


def get_mailer(container: ServiceContainer = Depends(get_container)) -> EmailService:
    return container.mailer


def get_booking_service(container: ServiceContainer = Depends(get_container)) -> BookingService:
    return BookingService(container.calendar, container.mailer, container.config)


def get_meeting_service(container: ServiceContainer = Depends(get_container)) -> MeetingService:
    return MeetingService(container.calendar, container.mailer)
