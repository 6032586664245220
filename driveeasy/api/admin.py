"""Admin-only endpoints: booking review and the user list."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from driveeasy.api.auth import require_admin
from driveeasy.api.bookings import get_booking_service
from driveeasy.core.database import get_db
from driveeasy.schemas.auth import SessionData, UserListItem
from driveeasy.schemas.booking import (
    BookingResponse,
    BookingUpdateRequest,
    BookingUpdateResponse,
)
from driveeasy.services.accounts import list_users
from driveeasy.services.bookings import BookingService, to_response

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/admin/bookings", response_model=list[BookingResponse])
def all_bookings(
    _admin: Annotated[SessionData, Depends(require_admin)],
    service: Annotated[BookingService, Depends(get_booking_service)],
) -> list[BookingResponse]:
    """Every booking; pending first so the review queue is on top."""
    return [to_response(b) for b in service.list_all_bookings()]


@router.put("/admin/bookings/{booking_id}", response_model=BookingUpdateResponse)
def update_booking(
    booking_id: int,
    body: BookingUpdateRequest,
    admin: Annotated[SessionData, Depends(require_admin)],
    service: Annotated[BookingService, Depends(get_booking_service)],
) -> BookingUpdateResponse:
    """
    Approve, reject or reset a booking and notify its owner.

    Approving needs an instructor, either in the body or already assigned.
    """
    booking = service.transition_booking(booking_id, body.status, body.instructor_id)
    logger.info("Booking %s %s by admin %s", booking.id, booking.status, admin.email)
    return BookingUpdateResponse(
        message=f"Booking {booking.status} successfully and user has been notified",
        booking_id=booking.id,
    )


@router.get("/users", response_model=list[UserListItem])
def users(
    _admin: Annotated[SessionData, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> list[UserListItem]:
    """List all users (admin only), newest first."""
    return [UserListItem.model_validate(u) for u in list_users(db)]
