"""Learner and instructor booking endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from driveeasy.api.auth import get_current_session, require_instructor
from driveeasy.core.database import get_db
from driveeasy.schemas.auth import SessionData
from driveeasy.schemas.booking import (
    BookingCreateRequest,
    BookingCreateResponse,
    BookingResponse,
)
from driveeasy.services.bookings import BookingService, to_response

router = APIRouter()


def get_booking_service(db: Annotated[Session, Depends(get_db)]) -> BookingService:
    return BookingService(db)


@router.post("/bookings", response_model=BookingCreateResponse)
def create_booking(
    body: BookingCreateRequest,
    session: Annotated[SessionData, Depends(get_current_session)],
    service: Annotated[BookingService, Depends(get_booking_service)],
) -> BookingCreateResponse:
    """
    Request a lesson. The booking starts pending; an admin approves it and
    assigns an instructor. Fails with 400 while another booking is active.
    """
    booking = service.create_booking(
        user_id=session.user_id,
        student_name=body.student_name,
        phone=body.phone,
        address=body.address,
        start_date=body.start_date,
        time_slot=body.time_slot,
        license_type=body.license_type,
        instructor_id=body.instructor_id,
    )
    return BookingCreateResponse(booking_id=booking.id)


@router.get("/my-bookings", response_model=list[BookingResponse])
def my_bookings(
    session: Annotated[SessionData, Depends(get_current_session)],
    service: Annotated[BookingService, Depends(get_booking_service)],
) -> list[BookingResponse]:
    return [to_response(b) for b in service.list_user_bookings(session.user_id)]


@router.get("/instructor/bookings", response_model=list[BookingResponse])
def instructor_bookings(
    session: Annotated[SessionData, Depends(require_instructor)],
    service: Annotated[BookingService, Depends(get_booking_service)],
) -> list[BookingResponse]:
    """Approved bookings assigned to the calling instructor, by date and slot."""
    return [to_response(b) for b in service.list_instructor_bookings(session.user_id)]
