# image_queue/services/queue.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from image_queue.core.logging import logger
from image_queue.schemas import queue as schema
from image_queue.schemas.queue import QueueItem, queue_fields
from image_queue.services.record_store import RecordStoreClient


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class QueueService:
    """
    Publish-queue operations over the Image Queue table.

    Priorities are dense per user, starting at 1. New items take the
    current highest priority + 1; a reorder rewrites the priority of every
    listed record. Neither path is guarded against concurrent writers: two
    registrations racing for the same user can read the same highest
    priority, and overlapping reorders are last-write-wins per record.
    """

    def __init__(self, store: RecordStoreClient, table: str = "Image Queue"):
        self.store = store
        self.table = table

    def _decode(self, record) -> QueueItem:
        return QueueItem.from_record(record, self.table)

    def next_priority(self, user_email: str) -> int:
        records = self.store.list_records(
            self.table,
            match={schema.USER_EMAIL: user_email},
            sort=[(schema.PRIORITY, "desc")],
            max_records=1,
        )
        if not records:
            return 1
        highest = records[0].get(schema.PRIORITY) or 0
        return int(highest) + 1

    def register(
        self,
        user_email: str,
        url: str,
        name: Optional[str],
        size: Optional[int],
        notes: Optional[str] = None,
        publish_date: Optional[str] = None,
        publish_time: Optional[str] = None,
        experience_type: Optional[str] = None,
        bank_item_id: Optional[str] = None,
    ) -> QueueItem:
        """Create a queued record at the end of the user's queue."""
        priority = self.next_priority(user_email)
        record = self.store.create_record(
            self.table,
            queue_fields(
                user_email=user_email,
                image_url=url,
                file_name=name,
                file_size=size,
                priority=priority,
                upload_date=utc_now_iso(),
                notes=notes,
                publish_date=publish_date,
                publish_time=publish_time,
                experience_type=experience_type,
                bank_item_id=bank_item_id,
            ),
        )
        item = self._decode(record)
        logger.info(f"Queued {item.id} for {user_email} at priority {item.priority}")
        return item

    def list_for_user(self, user_email: str) -> List[QueueItem]:
        records = self.store.list_records(
            self.table,
            match={schema.USER_EMAIL: user_email},
            sort=[(schema.PRIORITY, "asc")],
        )
        return [self._decode(record) for record in records]

    def find_by_bank_item(self, user_email: str, bank_item_id: str) -> Optional[QueueItem]:
        records = self.store.list_records(
            self.table,
            match={schema.USER_EMAIL: user_email, schema.BANK_ITEM_ID: bank_item_id},
            max_records=1,
        )
        return self._decode(records[0]) if records else None

    def reorder(self, user_email: str, new_order: Sequence[str]) -> None:
        """
        Rewrite priorities so that new_order[i] gets priority i + 1.

        Records of the user that are missing from new_order keep their old
        priority. Ownership of the listed ids is not checked.
        """
        updates = [(record_id, {schema.PRIORITY: index + 1}) for index, record_id in enumerate(new_order)]
        if not updates:
            return
        self.store.update_records(self.table, updates)
        logger.info(f"Reordered {len(updates)} queue items for {user_email}")

    def delete(self, record_id: str) -> bool:
        return self.store.delete_record(self.table, record_id)

    def update(
        self,
        record_id: str,
        file_name: Optional[str] = None,
        publish_date: Optional[str] = None,
        publish_time: Optional[str] = None,
    ) -> QueueItem:
        """Write only the fields that were provided."""
        changes: Dict[str, Any] = {}
        if file_name is not None:
            changes[schema.FILE_NAME] = file_name
        if publish_date is not None:
            changes[schema.PUBLISH_DATE] = publish_date
        if publish_time is not None:
            changes[schema.PUBLISH_TIME] = publish_time
        if not changes:
            return self._decode(self.store.get_record(self.table, record_id))
        return self._decode(self.store.update_record(self.table, record_id, changes))

    def add_tags(self, record_id: str, tags: Sequence[str]) -> QueueItem:
        record = self.store.get_record(self.table, record_id)
        merged = list(record.get(schema.TAGS) or [])
        for tag in tags:
            if tag not in merged:
                merged.append(tag)
        return self._decode(self.store.update_record(self.table, record_id, {schema.TAGS: merged}))

    def items_by_tag(self, user_email: str, tag: str) -> List[QueueItem]:
        return [item for item in self.list_for_user(user_email) if tag in item.tags]

    def set_processing_time(self, record_id: str, seconds: float) -> QueueItem:
        record = self.store.update_record(self.table, record_id, {schema.PROCESSING_TIME: seconds})
        return self._decode(record)
