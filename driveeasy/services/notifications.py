"""Notification dispatcher: append notifications and flip their read flag."""

import logging

from sqlalchemy.orm import Session

from driveeasy.core.errors import ValidationError
from driveeasy.models import Notification
from driveeasy.models.notification import NOTIFICATION_TYPES

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50


class NotificationDispatcher:
    def __init__(self, db: Session) -> None:
        self.db = db

    def notify(self, user_id: int, message: str, type: str) -> Notification:
        """
        Append an unread notification in the caller's transaction.

        Flushes but does not commit, so the notification lands atomically
        with whatever change triggered it.
        """
        if type not in NOTIFICATION_TYPES:
            raise ValidationError(f"Unknown notification type: {type}")
        notification = Notification(user_id=user_id, message=message, type=type, is_read=False)
        self.db.add(notification)
        self.db.flush()
        return notification

    def mark_read(self, notification_id: int, user_id: int) -> bool:
        """Mark one notification read if `user_id` owns it. Returns whether a row matched."""
        updated = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        self.db.commit()
        if not updated:
            logger.debug("mark_read no-op: notification=%s user=%s", notification_id, user_id)
        return bool(updated)

    def mark_all_read(self, user_id: int) -> int:
        """Mark every unread notification of the user read. Idempotent."""
        updated = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        self.db.commit()
        return updated

    def list_for_user(self, user_id: int, limit: int = DEFAULT_LIST_LIMIT) -> list[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all()
        )
