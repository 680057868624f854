from fastapi import APIRouter, Depends
from app.dependencies import get_booking_service
from app.schemas.booking import BookingRequest, BookingResponse
from app.services.booking_service import BookingService

router = APIRouter(tags=["Booking"])

@router.post("/send-mail", response_model=BookingResponse)
async def send_mail(
    request: BookingRequest,
    booking_service: BookingService = Depends(get_booking_service)
):
    """Book a meeting from the public form and notify everyone involved"""
    return await booking_service.book_meeting(request)
