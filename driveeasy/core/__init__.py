"""Core app configuration, database and error taxonomy."""

from driveeasy.core.config import get_settings, settings
from driveeasy.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
