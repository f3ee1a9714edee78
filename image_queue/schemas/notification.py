from typing import List, Optional

from image_queue.schemas.base import CamelModel
from image_queue.schemas.queue import build_from_record, require_fields
from image_queue.schemas.record import RemoteRecord

# Remote field names of the Notifications table
USER_EMAIL = "User Email"
TYPE = "Type"
TITLE = "Title"
MESSAGE = "Message"
RELATED_IMAGE_ID = "Related Image ID"
RELATED_IMAGE_URL = "Related Image URL"
IS_READ = "Is Read"
CREATED_DATE = "Created Date"

REQUIRED_FIELDS = [USER_EMAIL, TYPE, TITLE]

REMOTE_NAMES = {
    "user_email": USER_EMAIL,
    "type": TYPE,
    "title": TITLE,
    "message": MESSAGE,
    "related_image_id": RELATED_IMAGE_ID,
    "related_image_url": RELATED_IMAGE_URL,
    "is_read": IS_READ,
    "created_date": CREATED_DATE,
}


class Notification(CamelModel):
    id: str
    user_email: str
    type: str
    title: str
    message: str = ""
    related_image_id: Optional[str] = None
    related_image_url: Optional[str] = None
    is_read: bool = False
    created_date: Optional[str] = None

    @classmethod
    def from_record(cls, record: RemoteRecord, table: str = "Notifications") -> "Notification":
        require_fields(record, table, REQUIRED_FIELDS)
        fields = record.fields
        return build_from_record(
            cls,
            record,
            table,
            REMOTE_NAMES,
            id=record.id,
            user_email=fields[USER_EMAIL],
            type=fields[TYPE],
            title=fields[TITLE],
            message=fields.get(MESSAGE) or "",
            related_image_id=fields.get(RELATED_IMAGE_ID),
            related_image_url=fields.get(RELATED_IMAGE_URL),
            is_read=bool(fields.get(IS_READ)),
            created_date=fields.get(CREATED_DATE) or record.created_time,
        )


class NotificationCreateRequest(CamelModel):
    email: Optional[str] = None
    type: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None
    related_image_id: Optional[str] = None
    related_image_url: Optional[str] = None


class NotificationUpdateRequest(CamelModel):
    email: Optional[str] = None
    notification_id: Optional[str] = None
    mark_all_as_read: Optional[bool] = None


class NotificationResponse(CamelModel):
    success: bool = True
    notification: Notification


class NotificationListResponse(CamelModel):
    success: bool = True
    notifications: List[Notification]


