"""ORM model for lesson bookings."""

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import relationship

from driveeasy.core.security import NAME_MAX_LEN
from driveeasy.models.base import Base

BOOKING_PENDING = "pending"
BOOKING_APPROVED = "approved"
BOOKING_REJECTED = "rejected"
BOOKING_STATUSES = (BOOKING_PENDING, BOOKING_APPROVED, BOOKING_REJECTED)
ACTIVE_BOOKING_STATUSES = (BOOKING_PENDING, BOOKING_APPROVED)

TIME_SLOT_MAX_LEN = 64
LICENSE_TYPE_MAX_LEN = 64

ACTIVE_BOOKING_INDEX = "uq_bookings_one_active_per_user"
_ACTIVE_PREDICATE = text("status IN ('pending', 'approved')")


class Booking(Base):
    """
    A lesson booking. At most one row per user may be pending or approved;
    the partial unique index enforces it at the storage layer.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        Index(
            ACTIVE_BOOKING_INDEX,
            "user_id",
            unique=True,
            postgresql_where=_ACTIVE_PREDICATE,
            sqlite_where=_ACTIVE_PREDICATE,
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_name = Column(String(NAME_MAX_LEN), nullable=False)
    contact = Column(String(10), nullable=False)
    address = Column(Text, nullable=False, default="")
    time_slot = Column(String(TIME_SLOT_MAX_LEN), nullable=False)
    date = Column(Date, nullable=False)
    license_type = Column(String(LICENSE_TYPE_MAX_LEN), nullable=True)
    instructor_id = Column(
        Integer,
        ForeignKey("instructors.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    status = Column(String(32), nullable=False, default=BOOKING_PENDING)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    user = relationship("User", lazy="joined")
    instructor = relationship("Instructor", lazy="joined")
