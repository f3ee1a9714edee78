# image_queue/schemas/queue.py
from typing import Any, ClassVar, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import Field, ValidationError

from image_queue.schemas.base import CamelModel
from image_queue.schemas.record import RemoteRecord

QueueStatus = Literal["queued", "processing", "published", "failed"]

# Remote field names of the Image Queue table
USER_EMAIL = "User Email"
IMAGE_URL = "Image URL"
FILE_NAME = "File Name"
FILE_SIZE = "File Size"
STATUS = "Status"
UPLOAD_DATE = "Upload Date"
PUBLISH_DATE = "Publish Date"
PUBLISH_TIME = "Publish Time"
PRIORITY = "Priority"
NOTES = "Notes"
TAGS = "Tags"
EXPERIENCE_TYPE = "Experience Type"
PROCESSING_TIME = "Processing Time"
BANK_ITEM_ID = "Bank Item Id"

# Model attribute -> remote field name, for decode errors
REMOTE_NAMES = {
    "user_email": USER_EMAIL,
    "image_url": IMAGE_URL,
    "file_name": FILE_NAME,
    "file_size": FILE_SIZE,
    "status": STATUS,
    "upload_date": UPLOAD_DATE,
    "publish_date": PUBLISH_DATE,
    "publish_time": PUBLISH_TIME,
    "priority": PRIORITY,
    "notes": NOTES,
    "tags": TAGS,
    "experience_type": EXPERIENCE_TYPE,
    "processing_time": PROCESSING_TIME,
    "bank_item_id": BANK_ITEM_ID,
}

DEFAULT_NOTES = "Auto-queued from uploader"

M = TypeVar("M", bound=CamelModel)


class RecordDecodeError(ValueError):
    """A remote record is missing fields its table schema requires, or holds values of the wrong type."""

    def __init__(
        self,
        table: str,
        record_id: str,
        missing: Optional[List[str]] = None,
        invalid: Optional[List[str]] = None,
    ):
        self.table = table
        self.record_id = record_id
        self.missing = missing or []
        self.invalid = invalid or []
        problems = []
        if self.missing:
            problems.append(f"missing required fields: {', '.join(self.missing)}")
        if self.invalid:
            problems.append(f"invalid values in fields: {', '.join(self.invalid)}")
        super().__init__(f"Record {record_id} in '{table}' has {'; '.join(problems)}")


def require_fields(record: RemoteRecord, table: str, required: List[str]) -> None:
    missing = [name for name in required if record.fields.get(name) in (None, "")]
    if missing:
        raise RecordDecodeError(table, record.id, missing=missing)


def build_from_record(
    model: Type[M],
    record: RemoteRecord,
    table: str,
    remote_names: Dict[str, str],
    **values: Any,
) -> M:
    """Validate decoded values, reporting type errors against the remote field names."""
    try:
        return model(**values)
    except ValidationError as exc:
        lookup = {}
        for attr, remote in remote_names.items():
            lookup[attr] = remote
            alias = model.model_fields[attr].alias
            if alias:
                lookup[alias] = remote
        invalid = sorted({lookup.get(str(err["loc"][0]), str(err["loc"][0])) for err in exc.errors() if err["loc"]})
        raise RecordDecodeError(table, record.id, invalid=invalid) from exc


class QueueItem(CamelModel):
    """One queued image, as stored in the Image Queue table."""
    id: str
    user_email: str
    image_url: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    status: QueueStatus
    upload_date: Optional[str] = None
    publish_date: Optional[str] = None
    publish_time: Optional[str] = None
    priority: int
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    experience_type: Optional[str] = None
    processing_time: Optional[float] = None
    bank_item_id: Optional[str] = None

    REQUIRED_FIELDS: ClassVar[List[str]] = [USER_EMAIL, IMAGE_URL, STATUS, PRIORITY]

    @classmethod
    def from_record(cls, record: RemoteRecord, table: str = "Image Queue") -> "QueueItem":
        require_fields(record, table, cls.REQUIRED_FIELDS)
        fields = record.fields

        # Linked-record fields come back as a list of record ids
        experience_type = fields.get(EXPERIENCE_TYPE)
        if isinstance(experience_type, list):
            experience_type = experience_type[0] if experience_type else None

        return build_from_record(
            cls,
            record,
            table,
            REMOTE_NAMES,
            id=record.id,
            user_email=fields[USER_EMAIL],
            image_url=fields[IMAGE_URL],
            file_name=fields.get(FILE_NAME),
            file_size=fields.get(FILE_SIZE),
            status=fields[STATUS],
            upload_date=fields.get(UPLOAD_DATE),
            publish_date=fields.get(PUBLISH_DATE),
            publish_time=fields.get(PUBLISH_TIME),
            priority=fields[PRIORITY],
            notes=fields.get(NOTES),
            tags=fields.get(TAGS) or [],
            experience_type=experience_type,
            processing_time=fields.get(PROCESSING_TIME),
            bank_item_id=fields.get(BANK_ITEM_ID),
        )


class ImageData(CamelModel):
    url: Optional[str] = None
    name: Optional[str] = None
    size: Optional[int] = 0
    notes: Optional[str] = None


class QueueAddRequest(CamelModel):
    email: Optional[str] = None
    image_data: Optional[ImageData] = None


class QueueItemResponse(CamelModel):
    success: bool = True
    queue_item: QueueItem


class QueueListResponse(CamelModel):
    success: bool = True
    queue_items: List[QueueItem]


class QueueStatusRequest(CamelModel):
    email: Optional[str] = None


class ReorderRequest(CamelModel):
    user_email: Optional[str] = None
    new_order: Optional[Any] = None


class DeleteRequest(CamelModel):
    record_id: Optional[str] = None


class QueueUpdateRequest(CamelModel):
    record_id: Optional[str] = None
    file_name: Optional[str] = None
    publish_date: Optional[str] = None
    publish_time: Optional[str] = None


class BulkQueueEntry(CamelModel):
    image_url: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    notes: Optional[str] = None
    publish_date: Optional[str] = None
    publish_time: Optional[str] = None


class BulkAddRequest(CamelModel):
    email: Optional[str] = None
    queue_items: Optional[List[BulkQueueEntry]] = None
    workspace_code: Optional[str] = None


class BulkSummary(CamelModel):
    total: int
    successful: int
    failed: int


class BulkResult(CamelModel):
    original_id: str
    file_name: str
    status: Literal["success", "error"]
    queue_item_id: Optional[str] = None
    error: Optional[str] = None


class BulkAddResponse(CamelModel):
    success: bool = True
    summary: BulkSummary
    results: List[BulkResult]
    errors: Optional[List[BulkResult]] = None


class TagsRequest(CamelModel):
    record_id: Optional[str] = None
    tags: Optional[Any] = None


class ProcessingTimeRequest(CamelModel):
    record_id: Optional[str] = None
    processing_time_seconds: Optional[Any] = None


class MessageResponse(CamelModel):
    success: bool = True
    message: Optional[str] = None


def queue_fields(
    user_email: str,
    image_url: str,
    file_name: Optional[str],
    file_size: Optional[int],
    priority: int,
    upload_date: str,
    notes: Optional[str] = None,
    publish_date: Optional[str] = None,
    publish_time: Optional[str] = None,
    experience_type: Optional[str] = None,
    bank_item_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Field dictionary for a new Image Queue record."""
    fields: Dict[str, Any] = {
        USER_EMAIL: user_email,
        IMAGE_URL: image_url,
        FILE_NAME: file_name,
        FILE_SIZE: file_size or 0,
        STATUS: "queued",
        UPLOAD_DATE: upload_date,
        PRIORITY: priority,
        NOTES: notes or DEFAULT_NOTES,
    }
    if publish_date:
        fields[PUBLISH_DATE] = publish_date
    if publish_time:
        fields[PUBLISH_TIME] = publish_time
    if experience_type:
        fields[EXPERIENCE_TYPE] = [experience_type]
    if bank_item_id:
        fields[BANK_ITEM_ID] = bank_item_id
    return fields
