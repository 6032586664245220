"""ORM model for user-facing notifications."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, false, func

from driveeasy.models.base import Base

NOTIFICATION_BOOKING = "booking"
NOTIFICATION_BOOKING_UPDATE = "booking_update"
NOTIFICATION_TYPES = (NOTIFICATION_BOOKING, NOTIFICATION_BOOKING_UPDATE)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    type = Column(String(32), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
