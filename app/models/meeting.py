from beanie import Document
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from pydantic import Field


class MeetingStatus(str, Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"


class Meeting(Document):
    name: str
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None
    attendees: List[str] = Field(default_factory=list)
    companyName: Optional[str] = None
    industries: Optional[str] = None
    jobTitles: Optional[str] = None
    priority: Optional[str] = None
    monthlyContacts: Optional[str] = None
    # Stored as naive UTC, rendered in timeZone
    start: datetime
    end: datetime
    timeZone: str = "Asia/Kolkata"
    hangoutLink: Optional[str] = None
    htmlLink: Optional[str] = None
    eventId: Optional[str] = None
    status: MeetingStatus = MeetingStatus.SCHEDULED
    timeAdjusted: bool = False
    createdAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "meetings"
        indexes = [
            "email",
            "start",
            "status"
        ]

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Ann",
                "email": "ann@x.com",
                "phone": "+91 98765 43210",
                "message": "Would like a product demo",
                "attendees": ["ann@x.com", "bob@x.com"],
                "start": "2024-05-01T04:30:00",
                "end": "2024-05-01T05:00:00",
                "timeZone": "Asia/Kolkata",
                "hangoutLink": "https://meet.google.com/abc-defg-hij",
                "htmlLink": "https://www.google.com/calendar/event?eid=abc",
                "eventId": "abc123",
                "status": "scheduled"
            }
        }
    }
