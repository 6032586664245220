"""ORM model for server-side login sessions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from driveeasy.core.security import EMAIL_MAX_LEN, NAME_MAX_LEN
from driveeasy.models.base import Base


class UserSession(Base):
    """
    Session row keyed by the opaque id held in the client cookie.

    role/name/email are a snapshot taken at login; authorization reads the
    snapshot, not users.role.
    """

    __tablename__ = "sessions"

    id = Column(String(128), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(32), nullable=False)
    name = Column(String(NAME_MAX_LEN), nullable=False)
    email = Column(String(EMAIL_MAX_LEN), nullable=False)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
