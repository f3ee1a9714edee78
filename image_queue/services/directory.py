# image_queue/services/directory.py
from typing import Any, Dict, Optional

from image_queue.core.logging import logger
from image_queue.models.user import User
from image_queue.schemas.record import RemoteRecord
from image_queue.services.queue import utc_now_iso
from image_queue.services.record_store import RecordStoreClient

# Remote field names of the Users table
EMAIL = "Email"
IS_VERIFIED = "Is Verified"
IS_PAID = "Is Paid"
SUBSCRIPTION_TIER = "Subscription Tier"
CREATED_DATE = "Created Date"
LAST_LOGIN = "Last Login"


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


class UserDirectory:
    """
    Mirror of relational users in the remote Users table.

    The relational store stays authoritative; the remote rows exist so the
    external publisher can see who is verified.
    """

    def __init__(self, store: RecordStoreClient, table: str = "Users"):
        self.store = store
        self.table = table

    def find(self, email: str) -> Optional[RemoteRecord]:
        records = self.store.list_records(self.table, match={EMAIL: email}, max_records=1)
        return records[0] if records else None

    def mirror(self, user: User) -> RemoteRecord:
        fields: Dict[str, Any] = {
            EMAIL: user.email,
            IS_VERIFIED: bool(user.is_verified),
            IS_PAID: bool(user.is_paid),
            SUBSCRIPTION_TIER: user.subscription_tier or "free",
            LAST_LOGIN: _iso(user.last_login) or utc_now_iso(),
        }

        existing = self.find(user.email)
        if existing:
            return self.store.update_record(self.table, existing.id, fields)

        fields[CREATED_DATE] = _iso(user.created_at) or utc_now_iso()
        record = self.store.create_record(self.table, fields)
        logger.info(f"Mirrored user {user.email} to remote record {record.id}")
        return record
