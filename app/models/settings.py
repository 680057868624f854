from beanie import Document, Indexed
from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field

SETTINGS_KEY = "default"


class EmailTransportConfig(BaseModel):
    service: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    secure: bool = False
    user: Optional[str] = None
    password: Optional[str] = None
    fromAddress: Optional[str] = None


class AppSettings(Document):
    """Singleton settings document, addressed by its unique key"""

    key: Indexed(str, unique=True) = SETTINGS_KEY
    adminEmail: Optional[str] = None
    defaultDurationMinutes: int = 30
    sendInvites: bool = True
    emailTransport: Optional[EmailTransportConfig] = None
    createdAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updatedAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "settings"
