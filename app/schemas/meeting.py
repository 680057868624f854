from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional

class MeetingResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    message: Optional[str] = None
    attendees: List[str]
    companyName: Optional[str] = None
    industries: Optional[str] = None
    jobTitles: Optional[str] = None
    priority: Optional[str] = None
    monthlyContacts: Optional[str] = None
    start: datetime
    end: datetime
    timeZone: str
    hangoutLink: Optional[str] = None
    htmlLink: Optional[str] = None
    eventId: Optional[str] = None
    status: str
    timeAdjusted: bool = False
    createdAt: datetime

class MeetingListResponse(BaseModel):
    meetings: List[MeetingResponse]
    total: int
