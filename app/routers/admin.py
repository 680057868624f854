from fastapi import APIRouter, Depends, Query, status
from typing import Optional
from app.auth.jwt import get_current_admin
from app.database import ping_db
from app.dependencies import get_calendar, get_mailer, get_meeting_service
from app.errors import PersistenceError
from app.models.admin import Admin
from app.schemas.admin import (
    ActionResponse,
    AdminLogin,
    AdminProfile,
    DiagnosticsResponse,
    EmailUpdate,
    EmailUpdateResponse,
    LoginResponse,
    MailCheckRequest,
    MailCheckResponse,
    PasswordUpdate,
)
from app.schemas.meeting import MeetingListResponse
from app.schemas.settings import SettingsResponse, SettingsUpdate, SettingsUpdateResponse
from app.schemas.team import TeamMemberCreate, TeamMemberListResponse, TeamMemberResponse
from app.services.auth_service import AuthService
from app.services.calendar_service import GoogleCalendarManager
from app.services.email_service import EmailService
from app.services.email_templates import diagnostic_notification
from app.services.meeting_service import MeetingService
from app.services.settings_service import SettingsService
from app.services.team_service import TeamService

router = APIRouter(prefix="/admin", tags=["Admin"])

@router.post("/login", response_model=LoginResponse)
async def login(login_data: AdminLogin):
    """Login administrator and return JWT token"""
    return await AuthService.login_admin(login_data.email, login_data.password)

@router.get("/profile", response_model=AdminProfile)
async def get_profile(current_admin: Admin = Depends(get_current_admin)):
    """Get current administrator profile"""
    return AuthService.get_profile(current_admin)

@router.put("/update-email", response_model=EmailUpdateResponse)
async def update_email(
    email_data: EmailUpdate,
    current_admin: Admin = Depends(get_current_admin)
):
    """Change the administrator login email"""
    return await AuthService.update_email(current_admin, email_data.email)

@router.put("/update-password", response_model=ActionResponse)
async def update_password(
    password_data: PasswordUpdate,
    current_admin: Admin = Depends(get_current_admin)
):
    """Change the administrator password"""
    return await AuthService.update_password(
        current_admin, password_data.oldPassword, password_data.newPassword
    )

@router.get("/settings", response_model=SettingsResponse)
async def get_settings(current_admin: Admin = Depends(get_current_admin)):
    """Get booking settings, creating defaults on first read"""
    return SettingsService.to_response(await SettingsService.get_settings())

@router.put("/settings", response_model=SettingsUpdateResponse)
async def update_settings(
    settings_data: SettingsUpdate,
    current_admin: Admin = Depends(get_current_admin)
):
    """Update booking settings"""
    document = await SettingsService.update_settings(settings_data)
    return SettingsUpdateResponse(settings=SettingsService.to_response(document))

@router.get("/meetings", response_model=MeetingListResponse)
async def get_meetings(
    search: Optional[str] = Query(None, description="Substring of name or email"),
    startDate: Optional[str] = Query(None, description="Earliest start, ISO date or datetime"),
    endDate: Optional[str] = Query(None, description="Latest start, ISO date or datetime"),
    status: Optional[str] = Query(None, description="scheduled or cancelled"),
    current_admin: Admin = Depends(get_current_admin)
):
    """List booked meetings"""
    return await MeetingService.list_meetings(search, startDate, endDate, status)

@router.delete("/delete-meeting/{meeting_id}", response_model=ActionResponse)
async def delete_meeting(
    meeting_id: str,
    current_admin: Admin = Depends(get_current_admin),
    meeting_service: MeetingService = Depends(get_meeting_service)
):
    """Delete a meeting and its calendar event"""
    return await meeting_service.delete_meeting(meeting_id)

@router.post("/cancel-meeting/{meeting_id}", response_model=ActionResponse)
async def cancel_meeting(
    meeting_id: str,
    current_admin: Admin = Depends(get_current_admin),
    meeting_service: MeetingService = Depends(get_meeting_service)
):
    """Cancel a meeting and notify the requester"""
    return await meeting_service.cancel_meeting(meeting_id)

@router.get("/team", response_model=TeamMemberListResponse)
async def get_team(current_admin: Admin = Depends(get_current_admin)):
    """List team members who receive booking notifications"""
    return await TeamService.list_members()

@router.post("/team", response_model=TeamMemberResponse, status_code=status.HTTP_201_CREATED)
async def add_team_member(
    member_data: TeamMemberCreate,
    current_admin: Admin = Depends(get_current_admin)
):
    """Add a team member"""
    return await TeamService.add_member(member_data)

@router.delete("/team/{member_id}", response_model=ActionResponse)
async def remove_team_member(
    member_id: str,
    current_admin: Admin = Depends(get_current_admin)
):
    """Remove a team member"""
    await TeamService.remove_member(member_id)
    return ActionResponse(message="Team member removed")

@router.get("/diagnostics", response_model=DiagnosticsResponse)
async def diagnostics(
    current_admin: Admin = Depends(get_current_admin),
    calendar: GoogleCalendarManager = Depends(get_calendar),
    mailer: EmailService = Depends(get_mailer)
):
    """Database, mail transport and Google link status"""
    database_ok = await ping_db()
    return DiagnosticsResponse(
        database="connected" if database_ok else "disconnected",
        mail=mailer.transport_info(),
        google=calendar.status()
    )

@router.post("/test-mail", response_model=MailCheckResponse)
async def send_test_mail(
    mail_data: Optional[MailCheckRequest] = None,
    current_admin: Admin = Depends(get_current_admin),
    mailer: EmailService = Depends(get_mailer)
):
    """Send a test email, by default to the admin address"""
    recipient = mail_data.to if mail_data and mail_data.to else None
    if not recipient:
        try:
            recipient = (await SettingsService.get_settings()).adminEmail
        except PersistenceError:
            recipient = None
    recipient = recipient or current_admin.email

    delivery = await mailer.send([recipient], "Test Email", diagnostic_notification())
    return MailCheckResponse(
        message=f"Test email sent to {recipient}",
        messageId=delivery.message_id,
        recipients=delivery.recipients
    )
