"""Notification inbox API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from yang.api.dependencies import get_current_user_id, get_notification_service
from yang.exceptions import ValidationFailed
from yang.schemas.base import OkResponse
from yang.schemas.notification import (
    NotificationCreate,
    NotificationDelete,
    NotificationEnvelope,
    NotificationListResponse,
    NotificationResponse,
    NotificationUpdate,
)
from yang.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    user_id: Annotated[int, Depends(get_current_user_id)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    """List the caller's notifications, newest first."""
    notifications = service.list_for_user(user_id, limit=limit, offset=offset)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=service.unread_count(user_id),
    )


@router.post("", response_model=NotificationEnvelope)
async def create_notification(
    payload: NotificationCreate,
    response: Response,
    user_id: Annotated[int, Depends(get_current_user_id)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Notify another user about something the caller did."""
    notification, created = service.create(
        actor_id=user_id,
        recipient_id=payload.recipient_id,
        notification_type=payload.type,
        target_type=payload.target_type,
        target_id=payload.target_id,
        content=payload.content,
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return NotificationEnvelope(
        notification=NotificationResponse.model_validate(notification) if notification else None
    )


@router.put("", response_model=NotificationEnvelope | OkResponse)
async def update_notification(
    user_id: Annotated[int, Depends(get_current_user_id)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
    payload: NotificationUpdate | None = None,
    mark_all_as_read: Annotated[bool, Query(alias="markAllAsRead")] = False,
):
    """Set the read state of one notification, or mark them all as read."""
    if mark_all_as_read:
        service.mark_all_read(user_id)
        return OkResponse()

    if payload is None or payload.notification_id is None:
        raise ValidationFailed("A notification id is required.")
    notification = service.set_read(user_id, payload.notification_id, payload.is_read)
    return NotificationEnvelope(notification=NotificationResponse.model_validate(notification))


@router.delete("", response_model=OkResponse)
async def delete_notification(
    payload: NotificationDelete,
    user_id: Annotated[int, Depends(get_current_user_id)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """Delete one of the caller's notifications."""
    service.delete(user_id, payload.notification_id)
    return OkResponse()
