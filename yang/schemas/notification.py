"""Notification-related Pydantic schemas."""

from datetime import datetime

from pydantic import ConfigDict, Field

from yang.schemas.base import CamelModel


class ActorResponse(CamelModel):
    """User who triggered a notification."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str


class NotificationResponse(CamelModel):
    """Schema for a notification."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    recipient_id: int
    actor_id: int
    type: str
    target_type: str
    target_id: int | None
    content: str
    is_read: bool
    created_at: datetime
    actor: ActorResponse | None = None


class NotificationListResponse(CamelModel):
    notifications: list[NotificationResponse]
    unread_count: int


class NotificationCreate(CamelModel):
    """Schema for creating a notification."""

    recipient_id: int
    type: str = Field(..., min_length=1, max_length=50)
    target_type: str = Field(..., min_length=1, max_length=50)
    target_id: int | None = None
    content: str | None = None


class NotificationEnvelope(CamelModel):
    notification: NotificationResponse | None


class NotificationUpdate(CamelModel):
    """Schema for updating the read state of one notification."""

    notification_id: int | None = None
    is_read: bool = True


class NotificationDelete(CamelModel):
    notification_id: int
