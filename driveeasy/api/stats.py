"""Dashboard counters."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from driveeasy.api.auth import get_current_session
from driveeasy.core.database import get_db
from driveeasy.schemas.auth import SessionData
from driveeasy.schemas.stats import StatsResponse
from driveeasy.services.accounts import get_stats

router = APIRouter()


@router.get("/stats", response_model=StatsResponse)
def stats(
    _session: Annotated[SessionData, Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
) -> StatsResponse:
    return get_stats(db)
