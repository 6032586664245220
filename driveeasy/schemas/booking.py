"""Request/response schemas for bookings."""

from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

BookingStatus = Literal["pending", "approved", "rejected"]


def _blank_to_none(v: object) -> object:
    if isinstance(v, str) and not v.strip():
        return None
    return v


# Forms post "" for "no instructor".
OptionalId = Annotated[int | None, BeforeValidator(_blank_to_none)]


class BookingCreateRequest(BaseModel):
    """POST /bookings body, camelCase on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    student_name: str = Field(default="", alias="studentName")
    phone: str = ""
    address: str = ""
    start_date: str = Field(default="", alias="startDate")
    time_slot: str = Field(default="", alias="timeSlot")
    license_type: str | None = Field(default=None, alias="licenseType")
    instructor_id: OptionalId = Field(default=None, alias="instructorId")


class BookingCreateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Booking submitted successfully! Admin will review and approve shortly."
    booking_id: int = Field(..., alias="bookingId")


class BookingUpdateRequest(BaseModel):
    """PUT /admin/bookings/{id} body. status is checked by the lifecycle engine."""

    status: str = ""
    instructor_id: OptionalId = None


class BookingUpdateResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    booking_id: int = Field(..., alias="bookingId")


class BookingResponse(BaseModel):
    """Booking row plus the joined user/instructor columns each listing needs."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    user_name: str
    contact: str
    address: str
    time_slot: str
    date: date
    license_type: str | None = None
    instructor_id: int | None = None
    status: BookingStatus
    created_at: datetime | None = None
    user_email: str | None = None
    instructor_name: str | None = None
    instructor_email: str | None = None
    instructor_license: str | None = None
