"""Public instructor listings."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from driveeasy.core.database import get_db
from driveeasy.schemas.instructor import InstructorResponse
from driveeasy.services.accounts import get_instructor, list_instructors

router = APIRouter()


@router.get("/instructors", response_model=list[InstructorResponse])
def get_instructors(db: Annotated[Session, Depends(get_db)]) -> list[InstructorResponse]:
    """All instructors ordered by name."""
    return [InstructorResponse.model_validate(i) for i in list_instructors(db)]


@router.get("/instructors/{instructor_id}", response_model=InstructorResponse)
def get_instructor_by_id(
    instructor_id: int,
    db: Annotated[Session, Depends(get_db)],
) -> InstructorResponse:
    return InstructorResponse.model_validate(get_instructor(db, instructor_id))
