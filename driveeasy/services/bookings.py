"""Booking lifecycle: request validation, the one-active-booking rule, admin transitions.

A user holds at most one active (pending or approved) booking. The service
checks before writing, and the partial unique index on bookings.user_id is
the backstop for two requests racing past the check: a violation of that
index is reported as DuplicateActiveBooking, any other IntegrityError
propagates.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime

from sqlalchemy import case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from driveeasy.core.errors import (
    DuplicateActiveBooking,
    InstructorRequired,
    InvalidStatus,
    NotFound,
    ValidationError,
)
from driveeasy.core.security import NAME_MAX_LEN, is_valid_contact, is_valid_name
from driveeasy.models import Booking, Instructor
from driveeasy.models.booking import (
    ACTIVE_BOOKING_INDEX,
    ACTIVE_BOOKING_STATUSES,
    BOOKING_APPROVED,
    BOOKING_PENDING,
    BOOKING_REJECTED,
    BOOKING_STATUSES,
    LICENSE_TYPE_MAX_LEN,
    TIME_SLOT_MAX_LEN,
)
from driveeasy.models.instructor import INSTRUCTOR_BUSY
from driveeasy.models.notification import NOTIFICATION_BOOKING, NOTIFICATION_BOOKING_UPDATE
from driveeasy.schemas.booking import BookingResponse
from driveeasy.services.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)

# Name used in the approval message when the instructor row has no name to offer.
FALLBACK_INSTRUCTOR_NAME = "Instructor"


def parse_booking_date(value: str | date | datetime | None) -> date:
    """Accept an ISO date or datetime (date part used). ValidationError otherwise."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not value.strip():
        raise ValidationError("Please select a valid future date")
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError("Please select a valid future date") from None


def submitted_message(booking_date: date, time_slot: str, instructor_name: str | None) -> str:
    message = (
        f"Your booking for {booking_date.isoformat()} ({time_slot}) has been submitted "
        "and is pending admin approval."
    )
    if instructor_name:
        return f"{message} Requested instructor: {instructor_name}."
    return f"{message} An instructor will be assigned after approval."


def approved_message(booking_date: date, time_slot: str, instructor_name: str) -> str:
    day = booking_date.isoformat()
    return (
        f"Great news! Your booking for {day} ({time_slot}) has been APPROVED!\n\n"
        f"Instructor: {instructor_name}\n"
        f"Date: {day}\n"
        f"Time: {time_slot}\n\n"
        "Please arrive 10 minutes early. Happy learning!"
    )


def rejected_message(booking_date: date, time_slot: str) -> str:
    return (
        f"Sorry, your booking for {booking_date.isoformat()} ({time_slot}) could not be approved. "
        "Please try booking a different time slot or contact us for assistance."
    )


def is_active_booking_conflict(exc: IntegrityError) -> bool:
    """True when the violation came from the one-active-booking index."""
    detail = str(exc.orig)
    # PostgreSQL names the index; SQLite only names the column.
    return ACTIVE_BOOKING_INDEX in detail or "UNIQUE constraint failed: bookings.user_id" in detail


def to_response(booking: Booking) -> BookingResponse:
    """Flatten a booking with its joined user and instructor rows."""
    response = BookingResponse.model_validate(booking)
    if booking.user is not None:
        response.user_email = booking.user.email
    if booking.instructor is not None:
        response.instructor_name = booking.instructor.name
        response.instructor_email = booking.instructor.email
        response.instructor_license = booking.instructor.license_id
    return response


class BookingService:
    """Booking lifecycle over an injected DB session."""

    def __init__(
        self,
        db: Session,
        notifications: NotificationDispatcher | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.db = db
        self.notifications = notifications or NotificationDispatcher(db)
        self._today = today

    def _get_instructor(self, instructor_id: int) -> Instructor:
        instructor = self.db.get(Instructor, instructor_id)
        if instructor is None:
            raise NotFound("Instructor not found")
        return instructor

    def _has_active_booking(self, user_id: int, exclude_id: int | None = None) -> bool:
        query = self.db.query(Booking.id).filter(
            Booking.user_id == user_id,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        if exclude_id is not None:
            query = query.filter(Booking.id != exclude_id)
        return query.first() is not None

    def create_booking(
        self,
        user_id: int,
        student_name: str,
        phone: str,
        address: str,
        start_date: str | date,
        time_slot: str,
        license_type: str | None = None,
        instructor_id: int | None = None,
    ) -> Booking:
        """
        Validate and insert a pending booking, then notify the user.

        Raises ValidationError, NotFound (unknown requested instructor) or
        DuplicateActiveBooking.
        """
        if not is_valid_name(student_name):
            raise ValidationError("Please provide a valid name")
        if len(student_name.strip()) > NAME_MAX_LEN:
            raise ValidationError(f"Name must be at most {NAME_MAX_LEN} characters")
        if not is_valid_contact(phone):
            raise ValidationError("Contact number must be exactly 10 digits")
        slot = (time_slot or "").strip()
        if not slot or len(slot) > TIME_SLOT_MAX_LEN:
            raise ValidationError("Please select a valid time slot")
        if license_type and len(license_type) > LICENSE_TYPE_MAX_LEN:
            raise ValidationError("Please select a valid license type")
        booking_date = parse_booking_date(start_date)
        if booking_date < self._today():
            raise ValidationError("Please select a valid future date")

        instructor = self._get_instructor(instructor_id) if instructor_id else None

        if self._has_active_booking(user_id):
            raise DuplicateActiveBooking()

        booking = Booking(
            user_id=user_id,
            user_name=student_name.strip(),
            contact=phone,
            address=(address or "").strip(),
            time_slot=slot,
            date=booking_date,
            license_type=license_type,
            instructor_id=instructor.id if instructor else None,
            status=BOOKING_PENDING,
        )
        self.db.add(booking)
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            if not is_active_booking_conflict(e):
                raise
            raise DuplicateActiveBooking() from None

        self.notifications.notify(
            user_id,
            submitted_message(booking.date, booking.time_slot, instructor.name if instructor else None),
            NOTIFICATION_BOOKING,
        )
        self.db.commit()
        logger.info("New booking created: id=%s user=%s", booking.id, user_id)
        return booking

    def transition_booking(
        self,
        booking_id: int,
        status: str,
        instructor_id: int | None = None,
    ) -> Booking:
        """
        Admin status change with optional instructor assignment.

        The supplied instructor replaces the current one; without one the
        current assignment stays. Any supplied instructor is marked busy,
        whatever the target status.
        """
        booking = self.db.get(Booking, booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        if status not in BOOKING_STATUSES:
            raise InvalidStatus()
        if status == BOOKING_APPROVED and not (instructor_id or booking.instructor_id):
            raise InstructorRequired()

        instructor = self._get_instructor(instructor_id) if instructor_id else None

        reactivating = status in ACTIVE_BOOKING_STATUSES and booking.status not in ACTIVE_BOOKING_STATUSES
        if reactivating and self._has_active_booking(booking.user_id, exclude_id=booking.id):
            raise DuplicateActiveBooking(
                "User already has another active booking",
                "Reject or complete the other booking first.",
            )

        booking.status = status
        if instructor is not None:
            booking.instructor_id = instructor.id
            instructor.status = INSTRUCTOR_BUSY
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            if not is_active_booking_conflict(e):
                raise
            raise DuplicateActiveBooking(
                "User already has another active booking",
                "Reject or complete the other booking first.",
            ) from None

        message = self._transition_message(booking, status)
        if message is not None:
            self.notifications.notify(booking.user_id, message, NOTIFICATION_BOOKING_UPDATE)
        self.db.commit()
        self.db.refresh(booking)
        logger.info(
            "Booking %s %s (instructor=%s)", booking.id, status, booking.instructor_id
        )
        return booking

    def _transition_message(self, booking: Booking, status: str) -> str | None:
        if status == BOOKING_APPROVED:
            assigned = self.db.get(Instructor, booking.instructor_id) if booking.instructor_id else None
            name = assigned.name if assigned is not None and assigned.name else FALLBACK_INSTRUCTOR_NAME
            return approved_message(booking.date, booking.time_slot, name)
        if status == BOOKING_REJECTED:
            return rejected_message(booking.date, booking.time_slot)
        # Moving back to pending tells the user nothing.
        return None

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.db.get(Booking, booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        return booking

    def list_user_bookings(self, user_id: int) -> list[Booking]:
        return (
            self.db.query(Booking)
            .filter(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
            .all()
        )

    def list_instructor_bookings(self, user_id: int) -> list[Booking]:
        """Approved bookings assigned to the instructor profile owned by `user_id`."""
        instructor = self.db.query(Instructor).filter(Instructor.user_id == user_id).first()
        if instructor is None:
            raise NotFound("Instructor profile not found")
        return (
            self.db.query(Booking)
            .filter(Booking.instructor_id == instructor.id, Booking.status == BOOKING_APPROVED)
            .order_by(Booking.date.asc(), Booking.time_slot.asc())
            .all()
        )

    def list_all_bookings(self) -> list[Booking]:
        """Pending first, then approved, then rejected; newest first within each."""
        status_order = case(
            (Booking.status == BOOKING_PENDING, 1),
            (Booking.status == BOOKING_APPROVED, 2),
            (Booking.status == BOOKING_REJECTED, 3),
            else_=4,
        )
        return (
            self.db.query(Booking)
            .order_by(status_order, Booking.created_at.desc(), Booking.id.desc())
            .all()
        )
