"""Response schema for GET /stats."""

from pydantic import BaseModel, ConfigDict, Field


class StatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    active_learners: int = Field(..., alias="activeLearners")
    classes_booked: int = Field(..., alias="classesBooked")
    pending_bookings: int = Field(..., alias="pendingBookings")
    approved_bookings: int = Field(..., alias="approvedBookings")
