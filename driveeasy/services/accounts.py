"""Credential store: registration, password login, and the read-only listings."""

import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from driveeasy.core.errors import InvalidCredentials, NotFound, ValidationError
from driveeasy.core.security import (
    BCRYPT_ROUNDS,
    NAME_MAX_LEN,
    hash_password,
    is_valid_email,
    is_valid_name,
    is_valid_password,
    normalize_email,
    verify_password,
)
from driveeasy.models import Booking, Instructor, User
from driveeasy.models.booking import BOOKING_APPROVED, BOOKING_PENDING
from driveeasy.models.instructor import (
    DEFAULT_EXPERIENCE,
    INSTRUCTOR_AVAILABLE,
    license_id_for,
)
from driveeasy.models.user import ROLE_INSTRUCTOR, ROLE_USER, VALID_ROLES
from driveeasy.schemas.stats import StatsResponse

logger = logging.getLogger(__name__)


def register_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    role: str,
    bcrypt_rounds: int = BCRYPT_ROUNDS,
) -> User:
    """
    Create a user; instructors also get their listing row in the same transaction.

    Raises ValidationError on bad input or an already registered email.
    """
    if not is_valid_name(name):
        raise ValidationError("Name must be at least 2 characters")
    if len(name.strip()) > NAME_MAX_LEN:
        raise ValidationError(f"Name must be at most {NAME_MAX_LEN} characters")
    email = normalize_email(email or "")
    if not is_valid_email(email):
        raise ValidationError("Invalid email format")
    if not is_valid_password(password):
        raise ValidationError("Password must be at least 6 characters")
    if role not in VALID_ROLES:
        raise ValidationError("Invalid role selected")

    if db.query(User.id).filter(User.email == email).first() is not None:
        raise ValidationError("Email already registered")

    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password, rounds=bcrypt_rounds),
        role=role,
    )
    db.add(user)
    try:
        db.flush()
        if role == ROLE_INSTRUCTOR:
            db.add(
                Instructor(
                    user_id=user.id,
                    name=user.name,
                    email=email,
                    license_id=license_id_for(user.id),
                    experience=DEFAULT_EXPERIENCE,
                    status=INSTRUCTOR_AVAILABLE,
                )
            )
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration for the same email.
        db.rollback()
        raise ValidationError("Email already registered")

    logger.info("New %s registered: %s", role, email)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Return the user for valid credentials; InvalidCredentials otherwise."""
    email = normalize_email(email or "")
    if not is_valid_email(email) or not password:
        raise ValidationError("Please provide valid email and password")

    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise InvalidCredentials()
    if not verify_password(password, user.password_hash):
        raise InvalidCredentials()
    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def list_instructors(db: Session) -> list[Instructor]:
    return db.query(Instructor).order_by(Instructor.name.asc()).all()


def get_instructor(db: Session, instructor_id: int) -> Instructor:
    instructor = db.get(Instructor, instructor_id)
    if instructor is None:
        raise NotFound("Instructor not found")
    return instructor


def get_stats(db: Session) -> StatsResponse:
    """Dashboard counters: learners, all bookings, pending and approved bookings."""
    learners = db.query(func.count(User.id)).filter(User.role == ROLE_USER).scalar()
    booked = db.query(func.count(Booking.id)).scalar()
    pending = db.query(func.count(Booking.id)).filter(Booking.status == BOOKING_PENDING).scalar()
    approved = db.query(func.count(Booking.id)).filter(Booking.status == BOOKING_APPROVED).scalar()
    return StatsResponse(
        active_learners=learners or 0,
        classes_booked=booked or 0,
        pending_bookings=pending or 0,
        approved_bookings=approved or 0,
    )
