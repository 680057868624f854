from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional
from app.models.settings import EmailTransportConfig

class EmailTransportView(BaseModel):
    """Transport config as returned to admins; the password is never echoed"""
    service: Optional[str] = None
    host: Optional[str] = None
    port: Optional[int] = None
    secure: bool = False
    user: Optional[str] = None
    fromAddress: Optional[str] = None
    hasPassword: bool = False

class SettingsResponse(BaseModel):
    adminEmail: Optional[str] = None
    defaultDurationMinutes: int
    sendInvites: bool
    emailTransport: Optional[EmailTransportView] = None
    createdAt: datetime
    updatedAt: datetime

class SettingsUpdate(BaseModel):
    adminEmail: Optional[EmailStr] = None
    defaultDurationMinutes: Optional[int] = Field(None, ge=1, le=24 * 60)
    sendInvites: Optional[bool] = None
    emailTransport: Optional[EmailTransportConfig] = None

class SettingsUpdateResponse(BaseModel):
    success: bool = True
    message: str = "Settings saved"
    settings: SettingsResponse
