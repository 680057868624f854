import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional

import pytz
from bson import ObjectId
from bson.errors import InvalidId

from app.config import settings
from app.errors import ExternalServiceError, NotFoundError, ValidationError
from app.models.meeting import Meeting, MeetingStatus
from app.schemas.admin import ActionResponse
from app.schemas.meeting import MeetingListResponse, MeetingResponse
from app.services.calendar_service import GoogleCalendarManager
from app.services.email_service import EmailService
from app.services.email_templates import cancellation_notification
from app.services.scheduling import ensure_utc, format_in_zone, to_storage

logger = logging.getLogger(__name__)


def _parse_bound(value: str, tz_name: str, end: bool) -> Dict[str, datetime]:
    """Mongo comparison for one side of a date range.

    A date-only end bound covers that whole day. Naive values are read in the
    booking time zone.
    """
    value = value.strip()
    tz = pytz.timezone(tz_name)
    try:
        if len(value) == 10:
            day = date.fromisoformat(value)
            local = tz.localize(datetime(day.year, day.month, day.day))
            if end:
                return {"$lt": to_storage(local + timedelta(days=1))}
            return {"$gte": to_storage(local)}

        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid date: {value}")

    if moment.tzinfo is None:
        moment = tz.localize(moment)
    return {"$lte": to_storage(moment)} if end else {"$gte": to_storage(moment)}


def build_meeting_query(
    search: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    status: Optional[str] = None,
    tz_name: str = settings.DEFAULT_TIMEZONE,
) -> Dict[str, Any]:
    """Mongo filter for the admin meeting list; all given filters apply together"""
    query: Dict[str, Any] = {}

    if search and search.strip():
        pattern = re.escape(search.strip())
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"email": {"$regex": pattern, "$options": "i"}},
        ]

    if status:
        allowed = [choice.value for choice in MeetingStatus]
        if status not in allowed:
            raise ValidationError(f"Invalid status: {status}. Expected one of {', '.join(allowed)}")
        query["status"] = status

    if start_date or end_date:
        start_filter: Dict[str, datetime] = {}
        if start_date:
            start_filter.update(_parse_bound(start_date, tz_name, end=False))
        if end_date:
            start_filter.update(_parse_bound(end_date, tz_name, end=True))
        query["start"] = start_filter

    return query


class MeetingService:
    """Admin-side meeting management"""

    def __init__(self, calendar: GoogleCalendarManager, mailer: EmailService):
        self.calendar = calendar
        self.mailer = mailer

    @staticmethod
    def to_response(meeting: Meeting) -> MeetingResponse:
        return MeetingResponse(
            id=str(meeting.id),
            name=meeting.name,
            email=meeting.email,
            phone=meeting.phone,
            message=meeting.message,
            attendees=meeting.attendees,
            companyName=meeting.companyName,
            industries=meeting.industries,
            jobTitles=meeting.jobTitles,
            priority=meeting.priority,
            monthlyContacts=meeting.monthlyContacts,
            start=ensure_utc(meeting.start),
            end=ensure_utc(meeting.end),
            timeZone=meeting.timeZone,
            hangoutLink=meeting.hangoutLink,
            htmlLink=meeting.htmlLink,
            eventId=meeting.eventId,
            status=MeetingStatus(meeting.status).value,
            timeAdjusted=meeting.timeAdjusted,
            createdAt=ensure_utc(meeting.createdAt)
        )

    @staticmethod
    async def list_meetings(
        search: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        status: Optional[str] = None,
    ) -> MeetingListResponse:
        """Get meetings matching the filters, earliest first"""
        query = build_meeting_query(search, start_date, end_date, status)
        meetings = await Meeting.find(query).sort([("start", 1)]).to_list()
        return MeetingListResponse(
            meetings=[MeetingService.to_response(meeting) for meeting in meetings],
            total=len(meetings)
        )

    @staticmethod
    async def get_meeting(meeting_id: str) -> Meeting:
        try:
            meeting = await Meeting.get(ObjectId(meeting_id))
        except (InvalidId, TypeError):
            meeting = None
        if not meeting:
            raise NotFoundError("Meeting not found")
        return meeting

    async def _delete_calendar_event(self, meeting: Meeting) -> None:
        """Best-effort removal of the linked calendar event"""
        if not meeting.eventId:
            return
        try:
            await self.calendar.delete_event(meeting.eventId)
        except ExternalServiceError as e:
            logger.warning(f"Failed to delete calendar event {meeting.eventId}: {e}")

    async def cancel_meeting(self, meeting_id: str) -> ActionResponse:
        """Cancel a meeting: drop the calendar event, mark cancelled, tell the requester"""
        meeting = await self.get_meeting(meeting_id)

        await self._delete_calendar_event(meeting)
        await meeting.set({Meeting.status: MeetingStatus.CANCELLED.value})

        # Send cancellation email to user
        html = cancellation_notification(
            meeting.name,
            format_in_zone(meeting.start, meeting.timeZone),
            meeting.timeZone,
        )
        try:
            await self.mailer.send([meeting.email], "Your Meeting Has Been Cancelled", html)
        except ExternalServiceError as e:
            logger.error(f"Failed to send cancellation email for meeting {meeting_id}: {e}")

        logger.info(f"Meeting {meeting_id} cancelled")
        return ActionResponse(message="Meeting cancelled")

    async def delete_meeting(self, meeting_id: str) -> ActionResponse:
        """Delete a meeting record and its calendar event"""
        meeting = await self.get_meeting(meeting_id)

        await self._delete_calendar_event(meeting)
        await meeting.delete()

        logger.info(f"Meeting {meeting_id} deleted")
        return ActionResponse(message="Meeting deleted")
