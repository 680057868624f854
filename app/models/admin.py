from beanie import Document, Indexed
from datetime import datetime, timezone
from typing import Optional
from pydantic import Field

class Admin(Document):
    email: Indexed(str, unique=True)
    passwordHash: str
    name: Optional[str] = None
    createdAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "admins"

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "admin@acme.io",
                "passwordHash": "$2b$12$...",
                "name": "Admin",
                "createdAt": "2024-01-01T00:00:00Z"
            }
        }
    }
