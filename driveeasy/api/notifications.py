"""Notification inbox endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from driveeasy.api.auth import get_current_session
from driveeasy.core.database import get_db
from driveeasy.schemas.auth import MessageResponse, SessionData
from driveeasy.schemas.notification import NotificationResponse
from driveeasy.services.notifications import NotificationDispatcher

router = APIRouter()


def get_dispatcher(db: Annotated[Session, Depends(get_db)]) -> NotificationDispatcher:
    return NotificationDispatcher(db)


@router.get("/notifications", response_model=list[NotificationResponse])
def list_notifications(
    session: Annotated[SessionData, Depends(get_current_session)],
    dispatcher: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
) -> list[NotificationResponse]:
    """The 50 most recent notifications of the caller."""
    return [
        NotificationResponse.model_validate(n)
        for n in dispatcher.list_for_user(session.user_id)
    ]


# Declared before /{notification_id}/read so "read-all" is never taken for an id.
@router.put("/notifications/read-all", response_model=MessageResponse)
def mark_all_read(
    session: Annotated[SessionData, Depends(get_current_session)],
    dispatcher: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
) -> MessageResponse:
    dispatcher.mark_all_read(session.user_id)
    return MessageResponse(message="All notifications marked as read")


@router.put("/notifications/{notification_id}/read", response_model=MessageResponse)
def mark_read(
    notification_id: int,
    session: Annotated[SessionData, Depends(get_current_session)],
    dispatcher: Annotated[NotificationDispatcher, Depends(get_dispatcher)],
) -> MessageResponse:
    """Mark one notification read. Someone else's id is silently ignored."""
    dispatcher.mark_read(notification_id, session.user_id)
    return MessageResponse(message="Notification marked as read")
