"""Pydantic request/response schemas."""

from driveeasy.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    SessionData,
    SessionStatus,
    UserListItem,
)
from driveeasy.schemas.booking import (
    BookingCreateRequest,
    BookingCreateResponse,
    BookingResponse,
    BookingStatus,
    BookingUpdateRequest,
    BookingUpdateResponse,
)
from driveeasy.schemas.health import HealthResponse
from driveeasy.schemas.instructor import InstructorResponse
from driveeasy.schemas.notification import NotificationResponse
from driveeasy.schemas.stats import StatsResponse

__all__ = [
    "BookingCreateRequest",
    "BookingCreateResponse",
    "BookingResponse",
    "BookingStatus",
    "BookingUpdateRequest",
    "BookingUpdateResponse",
    "HealthResponse",
    "InstructorResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "NotificationResponse",
    "RegisterRequest",
    "RegisterResponse",
    "SessionData",
    "SessionStatus",
    "StatsResponse",
    "UserListItem",
]
