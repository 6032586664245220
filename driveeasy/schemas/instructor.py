"""Response schema for instructor listings."""

from pydantic import BaseModel, ConfigDict


class InstructorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    license_id: str
    experience: str
    status: str
    image_url: str | None = None
