from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

REQUIRED_BOOKING_FIELDS = ("name", "email", "meetingDate", "meetingTime", "message")


class BookingRequest(BaseModel):
    # Required fields are checked by the booking service so a missing one
    # produces a domain ValidationError rather than a schema error
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    message: Optional[str] = None
    meetingDate: Optional[str] = Field(None, description="YYYY-MM-DD")
    meetingTime: Optional[str] = Field(None, description="HH:MM (24h) or HH:MM AM/PM")
    attendees: List[str] = Field(default_factory=list, description="Guest email addresses")
    companyName: Optional[str] = None
    industries: Optional[str] = None
    jobTitles: Optional[str] = None
    priority: Optional[str] = None
    monthlyContacts: Optional[str] = None

    @field_validator("attendees", mode="before")
    @classmethod
    def split_attendees(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [part for part in value.split(",")]
        return value

    @field_validator("industries", "jobTitles", "monthlyContacts", "priority", mode="before")
    @classmethod
    def join_multi_values(cls, value):
        if isinstance(value, list):
            return ", ".join(str(item) for item in value)
        if isinstance(value, (int, float)):
            return str(value)
        return value

    def missing_fields(self) -> List[str]:
        """Names of required fields that are absent or blank"""
        return [
            field for field in REQUIRED_BOOKING_FIELDS
            if not (getattr(self, field) or "").strip()
        ]

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Ann",
                "email": "ann@x.com",
                "phone": "+91 98765 43210",
                "message": "hi",
                "meetingDate": "2024-05-01",
                "meetingTime": "10:00",
                "attendees": ["bob@x.com"]
            }
        }
    }


class BookingResponse(BaseModel):
    success: bool
    message: str
    meetLink: Optional[str] = None
    eventLink: Optional[str] = None
    adminEmail: Optional[str] = None
    start: str
    end: str
    timeZone: str
    timeAdjusted: bool = False
    meetingId: Optional[str] = None
