"""SQLAlchemy ORM models."""

from driveeasy.models.base import Base
from driveeasy.models.booking import Booking
from driveeasy.models.instructor import Instructor
from driveeasy.models.notification import Notification
from driveeasy.models.session import UserSession
from driveeasy.models.user import User

__all__ = ["Base", "Booking", "Instructor", "Notification", "User", "UserSession"]
