# image_queue/services/notifications.py
from typing import List, Optional

from image_queue.core.logging import logger
from image_queue.schemas import notification as schema
from image_queue.schemas.notification import Notification
from image_queue.services.queue import utc_now_iso
from image_queue.services.record_store import RecordStoreClient


class NotificationService:
    def __init__(self, store: RecordStoreClient, table: str = "Notifications"):
        self.store = store
        self.table = table

    def list_for_user(self, user_email: str, unread_only: bool = False) -> List[Notification]:
        """Newest first."""
        records = self.store.list_records(
            self.table,
            match={schema.USER_EMAIL: user_email},
            sort=[(schema.CREATED_DATE, "desc")],
        )
        notifications = [Notification.from_record(record, self.table) for record in records]
        if unread_only:
            notifications = [n for n in notifications if not n.is_read]
        return notifications

    def create(
        self,
        user_email: str,
        type: str,
        title: str,
        message: str,
        related_image_id: Optional[str] = None,
        related_image_url: Optional[str] = None,
    ) -> Notification:
        fields = {
            schema.USER_EMAIL: user_email,
            schema.TYPE: type,
            schema.TITLE: title,
            schema.MESSAGE: message,
            schema.IS_READ: False,
            schema.CREATED_DATE: utc_now_iso(),
        }
        if related_image_id:
            fields[schema.RELATED_IMAGE_ID] = related_image_id
        if related_image_url:
            fields[schema.RELATED_IMAGE_URL] = related_image_url

        record = self.store.create_record(self.table, fields)
        logger.info(f"Created {type} notification {record.id} for {user_email}")
        return Notification.from_record(record, self.table)

    def mark_read(self, notification_id: str) -> None:
        self.store.update_record(self.table, notification_id, {schema.IS_READ: True})

    def mark_all_read(self, user_email: str) -> int:
        unread = self.list_for_user(user_email, unread_only=True)
        if unread:
            self.store.update_records(self.table, [(n.id, {schema.IS_READ: True}) for n in unread])
        return len(unread)
