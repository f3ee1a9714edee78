# image_queue/api/endpoints/notifications.py
from fastapi import APIRouter, Depends, HTTPException, status

from image_queue.api.deps import get_notification_service
from image_queue.core.logging import logger
from image_queue.schemas.notification import (
    NotificationCreateRequest,
    NotificationListResponse,
    NotificationResponse,
    NotificationUpdateRequest,
)
from image_queue.schemas.queue import MessageResponse, RecordDecodeError
from image_queue.services.notifications import NotificationService
from image_queue.services.record_store import RecordStoreError

router = APIRouter()


def _failure(message: str, exc: Exception) -> HTTPException:
    logger.error(f"{message}: {exc}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    email: str = "",
    unreadOnly: bool = False,
    notifications: NotificationService = Depends(get_notification_service),
):
    if not email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")
    try:
        items = notifications.list_for_user(email, unread_only=unreadOnly)
    except (RecordStoreError, RecordDecodeError) as exc:
        raise _failure("Failed to fetch notifications", exc)
    return NotificationListResponse(notifications=items)


@router.post("", response_model=NotificationResponse)
def create_notification(
    body: NotificationCreateRequest,
    notifications: NotificationService = Depends(get_notification_service),
):
    if not body.email or not body.type or not body.title or not body.message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email, type, title, and message are required",
        )
    try:
        notification = notifications.create(
            body.email,
            body.type,
            body.title,
            body.message,
            related_image_id=body.related_image_id,
            related_image_url=body.related_image_url,
        )
    except (RecordStoreError, RecordDecodeError) as exc:
        raise _failure("Failed to create notification", exc)
    return NotificationResponse(notification=notification)


@router.patch("", response_model=MessageResponse)
def mark_read(
    body: NotificationUpdateRequest,
    notifications: NotificationService = Depends(get_notification_service),
):
    try:
        if body.mark_all_as_read and body.email:
            count = notifications.mark_all_read(body.email)
            return MessageResponse(message=f"All notifications marked as read ({count})")
        if body.notification_id:
            notifications.mark_read(body.notification_id)
            return MessageResponse(message="Notification marked as read")
    except RecordStoreError as exc:
        raise _failure("Failed to mark notification as read", exc)

    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail="Either notificationId or markAllAsRead with email is required",
    )
