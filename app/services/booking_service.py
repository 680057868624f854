"""
Booking orchestration for the public meeting form.

A booking validates the request, resolves the time window, asks Google
Calendar for an event with a Meet link, records the attempt and notifies
everyone involved. When the calendar step fails the booking still succeeds in
an unlinked form: the request is recorded and admin, team and requester are
told that confirmation will happen manually.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from pymongo.errors import PyMongoError

from app.config import Settings, settings
from app.errors import ExternalServiceError, PersistenceError, ValidationError
from app.models.meeting import Meeting, MeetingStatus
from app.models.settings import AppSettings
from app.schemas.booking import BookingRequest, BookingResponse
from app.services.calendar_service import CalendarEvent, CalendarEventResult, GoogleCalendarManager
from app.services.email_service import EmailService
from app.services.email_templates import (
    fallback_admin_notification,
    fallback_requester_notification,
    meeting_notification,
    time_adjusted_notice,
)
from app.services.scheduling import MeetingWindow, RecipientSet, compute_window, to_storage
from app.services.settings_service import SettingsService
from app.services.team_service import TeamService

logger = logging.getLogger(__name__)

SCHEDULED_SUBJECT = "Meeting Scheduled"
FALLBACK_ADMIN_SUBJECT = "New Meeting Booking (Calendar not created)"
FALLBACK_REQUESTER_SUBJECT = "We Received Your Meeting Request"


@dataclass(frozen=True)
class BookingPolicy:
    """The parts of the settings document a booking depends on"""
    admin_email: Optional[str]
    duration_minutes: int
    send_invites: bool

    @classmethod
    def from_settings(cls, document: AppSettings) -> "BookingPolicy":
        return cls(
            admin_email=document.adminEmail,
            duration_minutes=document.defaultDurationMinutes,
            send_invites=document.sendInvites,
        )

    @classmethod
    def defaults(cls, config: Settings) -> "BookingPolicy":
        return cls(
            admin_email=config.ADMIN_EMAIL or None,
            duration_minutes=config.DEFAULT_MEETING_DURATION,
            send_invites=True,
        )

    @property
    def send_updates(self) -> str:
        return "all" if self.send_invites else "none"


class BookingService:
    def __init__(
        self,
        calendar: GoogleCalendarManager,
        mailer: EmailService,
        config: Settings = settings,
    ):
        self.calendar = calendar
        self.mailer = mailer
        self.config = config

    async def book_meeting(self, request: BookingRequest) -> BookingResponse:
        """Book a meeting from the public form"""
        if request.missing_fields():
            raise ValidationError("Name, email, meetingDate, meetingTime and message are required.")

        policy = await self._load_policy()
        window = compute_window(
            request.meetingDate,
            request.meetingTime,
            policy.duration_minutes,
            self.config.DEFAULT_TIMEZONE,
        )
        guests = RecipientSet(request.attendees)
        attendees = RecipientSet([request.email]).union(guests)

        try:
            event = await self.calendar.create_event(
                self._calendar_event(request, window, attendees, policy)
            )
        except ExternalServiceError as e:
            logger.warning(f"Failed to create Google Meeting: {e}")
            return await self._book_unlinked(request, window, attendees, policy)

        logger.info(f"Google Meeting created with link: {event.hangout_link}")
        return await self._book_linked(request, window, attendees, guests, policy, event)

    async def _load_policy(self) -> BookingPolicy:
        try:
            return BookingPolicy.from_settings(await SettingsService.get_settings())
        except PersistenceError as e:
            logger.error(f"Using default booking settings: {e}")
            return BookingPolicy.defaults(self.config)

    async def _team_emails(self) -> List[str]:
        try:
            return await TeamService.list_emails()
        except PersistenceError as e:
            logger.error(f"Notifying without team members: {e}")
            return []

    @staticmethod
    def _calendar_event(
        request: BookingRequest,
        window: MeetingWindow,
        attendees: RecipientSet,
        policy: BookingPolicy,
    ) -> CalendarEvent:
        summary = f"Meeting with {request.name.strip()}"
        if request.companyName:
            summary += f" ({request.companyName.strip()})"

        details = [
            f"Name: {request.name}",
            f"Email: {request.email}",
            f"Phone: {request.phone or '(not provided)'}",
        ]
        for label, value in (
            ("Company", request.companyName),
            ("Industries", request.industries),
            ("Job Titles", request.jobTitles),
            ("Priority", request.priority),
            ("Monthly Contacts", request.monthlyContacts),
        ):
            if value:
                details.append(f"{label}: {value}")
        details.append("")
        details.append(request.message or "")

        return CalendarEvent(
            summary=summary,
            description="\n".join(details),
            start_datetime=window.start,
            end_datetime=window.end,
            attendees=attendees.as_list(),
            timezone=window.time_zone,
            send_updates=policy.send_updates,
        )

    async def _record(
        self,
        request: BookingRequest,
        window: MeetingWindow,
        attendees: RecipientSet,
        event: Optional[CalendarEventResult] = None,
    ) -> Optional[Meeting]:
        """Persist the booking attempt; a store failure is logged, not raised"""
        meeting = Meeting(
            name=request.name.strip(),
            email=request.email.strip(),
            phone=request.phone,
            message=request.message,
            attendees=attendees.as_list(),
            companyName=request.companyName,
            industries=request.industries,
            jobTitles=request.jobTitles,
            priority=request.priority,
            monthlyContacts=request.monthlyContacts,
            start=to_storage(window.start),
            end=to_storage(window.end),
            timeZone=window.time_zone,
            hangoutLink=event.hangout_link if event else None,
            htmlLink=event.html_link if event else None,
            eventId=event.event_id if event else None,
            status=MeetingStatus.SCHEDULED,
            timeAdjusted=window.adjusted,
        )
        try:
            await meeting.insert()
        except PyMongoError as e:
            logger.error(f"Failed to save meeting to DB: {e}")
            return None

        logger.info(f"Meeting saved to DB: {meeting.id}")
        return meeting

    async def _notify(self, recipients: RecipientSet, subject: str, html: str) -> bool:
        """Best-effort send; failures are logged and reported as False"""
        if not recipients:
            logger.warning(f"No recipients for '{subject}', skipping email")
            return False
        try:
            await self.mailer.send(recipients.as_list(), subject, html)
        except ExternalServiceError as e:
            logger.error(f"Failed to send '{subject}' email: {e}")
            return False
        return True

    async def _book_linked(
        self,
        request: BookingRequest,
        window: MeetingWindow,
        attendees: RecipientSet,
        guests: RecipientSet,
        policy: BookingPolicy,
        event: CalendarEventResult,
    ) -> BookingResponse:
        meeting = await self._record(request, window, attendees, event)

        recipients = RecipientSet([request.email, policy.admin_email]).union(
            await self._team_emails(), guests
        )
        html = meeting_notification(
            name=request.name,
            email=request.email,
            start_formatted=window.start_formatted,
            end_formatted=window.end_formatted,
            tz=window.time_zone,
            meet_link=event.hangout_link,
            message=request.message,
            recipients=recipients,
            event_link=event.html_link,
        )
        if window.adjusted:
            html += time_adjusted_notice(window.start_formatted, window.time_zone)
        await self._notify(recipients, SCHEDULED_SUBJECT, html)

        return BookingResponse(
            success=True,
            message="Meeting scheduled and emails sent successfully.",
            meetLink=event.hangout_link,
            eventLink=event.html_link,
            adminEmail=policy.admin_email,
            start=window.start_formatted,
            end=window.end_formatted,
            timeZone=window.time_zone,
            timeAdjusted=window.adjusted,
            meetingId=str(meeting.id) if meeting else None,
        )

    async def _book_unlinked(
        self,
        request: BookingRequest,
        window: MeetingWindow,
        attendees: RecipientSet,
        policy: BookingPolicy,
    ) -> BookingResponse:
        meeting = await self._record(request, window, attendees)

        staff = RecipientSet([policy.admin_email]).union(await self._team_emails())
        await self._notify(
            staff,
            FALLBACK_ADMIN_SUBJECT,
            fallback_admin_notification(
                name=request.name,
                email=request.email,
                phone=request.phone,
                message=request.message,
                meeting_date=request.meetingDate,
                meeting_time=request.meetingTime,
                company_name=request.companyName,
                industries=request.industries,
                job_titles=request.jobTitles,
                priority=request.priority,
                monthly_contacts=request.monthlyContacts,
                attendees=attendees,
            ),
        )

        html = fallback_requester_notification(
            request.name, request.meetingDate, request.meetingTime, window.time_zone
        )
        if window.adjusted:
            html += time_adjusted_notice(window.start_formatted, window.time_zone)
        await self._notify(RecipientSet([request.email]), FALLBACK_REQUESTER_SUBJECT, html)

        return BookingResponse(
            success=True,
            message="Meeting request sent successfully! (Calendar not linked)",
            adminEmail=policy.admin_email,
            start=window.start_formatted,
            end=window.end_formatted,
            timeZone=window.time_zone,
            timeAdjusted=window.adjusted,
            meetingId=str(meeting.id) if meeting else None,
        )
