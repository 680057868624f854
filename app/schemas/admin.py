from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Any, Dict, List, Optional

class AdminLogin(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

class AdminInfo(BaseModel):
    email: str
    name: Optional[str] = None

class LoginResponse(BaseModel):
    token: str
    admin: AdminInfo

class AdminProfile(AdminInfo):
    createdAt: datetime

class EmailUpdate(BaseModel):
    email: EmailStr

class EmailUpdateResponse(BaseModel):
    success: bool = True
    message: str = "Email updated"
    email: str

class PasswordUpdate(BaseModel):
    oldPassword: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=6, max_length=100)

class ActionResponse(BaseModel):
    success: bool = True
    message: str

class MailCheckRequest(BaseModel):
    to: Optional[EmailStr] = None

class MailCheckResponse(ActionResponse):
    messageId: str
    recipients: List[str]

class DiagnosticsResponse(BaseModel):
    database: str
    mail: Dict[str, Any]
    google: Dict[str, Any]
