"""ORM model for instructor listings."""

from sqlalchemy import Column, ForeignKey, Integer, String

from driveeasy.core.security import EMAIL_MAX_LEN, NAME_MAX_LEN
from driveeasy.models.base import Base

INSTRUCTOR_AVAILABLE = "available"
INSTRUCTOR_BUSY = "busy"
DEFAULT_EXPERIENCE = "New Instructor"


def license_id_for(user_id: int) -> str:
    """License id derived from the owning user id, e.g. 7 -> 'LIC0007'."""
    return f"LIC{user_id:04d}"


class Instructor(Base):
    """
    Instructor listing. Self-registered instructors carry user_id; seeded
    listings may have none.
    """

    __tablename__ = "instructors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    name = Column(String(NAME_MAX_LEN), nullable=False)
    email = Column(String(EMAIL_MAX_LEN), nullable=False)
    license_id = Column(String(32), nullable=False)
    experience = Column(String(100), nullable=False, default=DEFAULT_EXPERIENCE)
    status = Column(String(32), nullable=False, default=INSTRUCTOR_AVAILABLE)
    image_url = Column(String(1024), nullable=True)
