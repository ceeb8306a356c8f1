"""In-app notifications: listing, creation with de-duplication, read state."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from yang.exceptions import NotFound
from yang.models import Notification
from yang.services.auth import get_user

logger = logging.getLogger(__name__)

NOTIFICATION_NOT_FOUND = "The notification could not be found."


class NotificationService:
    """Service for a user's notification inbox."""

    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: int, limit: int = 20, offset: int = 0) -> list[Notification]:
        """Newest notifications first, with the acting user loaded."""
        return (
            self.db.query(Notification)
            .options(joinedload(Notification.actor))
            .filter(Notification.recipient_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def unread_count(self, user_id: int) -> int:
        return (
            self.db.query(func.count(Notification.id))
            .filter(
                Notification.recipient_id == user_id,
                Notification.is_read == False,  # noqa: E712
            )
            .scalar()
        )

    def create(
        self,
        actor_id: int,
        recipient_id: int,
        notification_type: str,
        target_type: str,
        target_id: int | None = None,
        content: str | None = None,
    ) -> tuple[Notification | None, bool]:
        """Notify a user about something the actor did.

        Returns (notification, created). Nothing is created for self-notifications,
        and an identical unread notification is returned instead of a duplicate.
        """
        if recipient_id == actor_id:
            return None, False

        if not get_user(self.db, recipient_id):
            raise NotFound("The recipient could not be found.")

        existing = (
            self.db.query(Notification)
            .filter(
                Notification.recipient_id == recipient_id,
                Notification.actor_id == actor_id,
                Notification.type == notification_type,
                Notification.target_type == target_type,
                Notification.target_id == target_id,
                Notification.is_read == False,  # noqa: E712
            )
            .first()
        )
        if existing:
            return existing, False

        notification = Notification(
            recipient_id=recipient_id,
            actor_id=actor_id,
            type=notification_type,
            target_type=target_type,
            target_id=target_id,
            content=content or "",
            is_read=False,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        logger.info(f"Notification {notification.id} ({notification_type}) for user {recipient_id}")
        return notification, True

    def set_read(self, user_id: int, notification_id: int, is_read: bool) -> Notification:
        notification = self._get_owned(user_id, notification_id)
        notification.is_read = is_read
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_read(self, user_id: int) -> int:
        updated = (
            self.db.query(Notification)
            .filter(
                Notification.recipient_id == user_id,
                Notification.is_read == False,  # noqa: E712
            )
            .update({Notification.is_read: True}, synchronize_session=False)
        )
        self.db.commit()
        return updated

    def delete(self, user_id: int, notification_id: int) -> None:
        notification = self._get_owned(user_id, notification_id)
        self.db.delete(notification)
        self.db.commit()

    def _get_owned(self, user_id: int, notification_id: int) -> Notification:
        notification = (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.recipient_id == user_id)
            .first()
        )
        if not notification:
            raise NotFound(NOTIFICATION_NOT_FOUND)
        return notification
