"""ORM model for application users (credentials and role)."""

from sqlalchemy import Column, DateTime, Integer, String, func

from driveeasy.core.security import EMAIL_MAX_LEN, NAME_MAX_LEN
from driveeasy.models.base import Base

ROLE_USER = "user"
ROLE_INSTRUCTOR = "instructor"
ROLE_ADMIN = "admin"
VALID_ROLES = (ROLE_USER, ROLE_INSTRUCTOR, ROLE_ADMIN)


class User(Base):
    """
    User account for session authentication and role-based access control.

    role: 'user' (learner), 'instructor' or 'admin'. Fixed after registration.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(NAME_MAX_LEN), nullable=False)
    email = Column(String(EMAIL_MAX_LEN), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=ROLE_USER)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
