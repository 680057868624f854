from beanie import Document, Indexed
from datetime import datetime, timezone
from typing import Optional
from pydantic import Field

class TeamMember(Document):
    name: str
    email: Indexed(str, unique=True)
    role: Optional[str] = None
    createdAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "team_members"
