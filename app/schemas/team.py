from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import List, Optional

class TeamMemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: Optional[str] = None

class TeamMemberResponse(BaseModel):
    id: str
    name: str
    email: str
    role: Optional[str] = None
    createdAt: datetime

class TeamMemberListResponse(BaseModel):
    members: List[TeamMemberResponse]
    total: int
