import logging
from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from app.dependencies import get_calendar
from app.errors import ValidationError
from app.schemas.admin import ActionResponse
from app.schemas.google import GoogleStatusResponse
from app.services.calendar_service import GoogleCalendarManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Google OAuth"])

@router.get("/status", response_model=GoogleStatusResponse)
async def google_status(calendar: GoogleCalendarManager = Depends(get_calendar)):
    """Whether a Google account is linked"""
    return calendar.status()

@router.get("/auth")
async def google_auth(calendar: GoogleCalendarManager = Depends(get_calendar)):
    """Redirect to the Google consent screen"""
    return RedirectResponse(calendar.get_auth_url())

@router.get("/oauth2callback", response_model=ActionResponse)
async def oauth2callback(
    code: Optional[str] = None,
    calendar: GoogleCalendarManager = Depends(get_calendar)
):
    """Exchange the authorization code and store the tokens"""
    if not code:
        raise ValidationError("No code in request")

    logger.info(f"OAuth callback received code {code[:8]}...")
    await calendar.exchange_code_for_tokens(code)
    return ActionResponse(message="Authentication successful! You can close this tab.")

@router.get("/revoke", response_model=ActionResponse)
async def revoke(calendar: GoogleCalendarManager = Depends(get_calendar)):
    """Revoke the linked account and forget its tokens"""
    revoked = await calendar.revoke()
    message = "Google access revoked" if revoked else "Local Google tokens cleared"
    return ActionResponse(message=message)
