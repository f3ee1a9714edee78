# image_queue/services/bank.py
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from image_queue.core.errors import ConfigurationError
from image_queue.core.logging import logger
from image_queue.core.security import generate_secure_random_string, now_millis
from image_queue.models.bank import BankedImage
from image_queue.schemas.queue import QueueItem
from image_queue.services.queue import QueueService
from image_queue.services.workspaces import resolve_experience_type


class BankItemNotFound(LookupError):
    def __init__(self, user_email: str, item_id: str):
        super().__init__(f"Banked item {item_id} not found for {user_email}")
        self.user_email = user_email
        self.item_id = item_id


def new_bank_id() -> str:
    return f"bank_{now_millis()}_{generate_secure_random_string(9)}"


class BankRepository(ABC):
    """Per-user storage of staged images, keyed by email."""

    @abstractmethod
    def get(self, user_email: str) -> List[BankedImage]:
        ...

    @abstractmethod
    def find(self, user_email: str, item_id: str) -> Optional[BankedImage]:
        ...

    @abstractmethod
    def put(self, user_email: str, item: BankedImage) -> BankedImage:
        ...

    @abstractmethod
    def remove(self, user_email: str, item_id: str) -> bool:
        ...


class SqlBankRepository(BankRepository):
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_email: str) -> List[BankedImage]:
        return (
            self.db.query(BankedImage)
            .filter(BankedImage.user_email == user_email)
            .order_by(BankedImage.upload_date, BankedImage.id)
            .all()
        )

    def find(self, user_email: str, item_id: str) -> Optional[BankedImage]:
        return (
            self.db.query(BankedImage)
            .filter(BankedImage.user_email == user_email, BankedImage.id == item_id)
            .first()
        )

    def put(self, user_email: str, item: BankedImage) -> BankedImage:
        item.user_email = user_email
        item = self.db.merge(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def remove(self, user_email: str, item_id: str) -> bool:
        item = self.find(user_email, item_id)
        if not item:
            return False
        self.db.delete(item)
        self.db.commit()
        return True


class BankService:
    """
    Staging area in front of the publish queue.

    Promotion writes the queue record first and removes the bank entry
    afterwards. The queue record carries the bank item id, so a promotion
    retried after a failed removal finds the earlier record instead of
    creating a second one.
    """

    def __init__(self, repository: BankRepository, queue: Optional[QueueService] = None):
        self.repository = repository
        self.queue = queue

    def add(
        self,
        user_email: str,
        url: str,
        name: str,
        size: Optional[int] = 0,
        notes: Optional[str] = None,
        owner: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        publish_date: Optional[str] = None,
    ) -> BankedImage:
        item = BankedImage(
            id=new_bank_id(),
            image_url=url,
            file_name=name,
            file_size=size or 0,
            owner=owner or "",
            notes=notes or "",
            tags=list(tags or []),
            approved=False,
            publish_date=publish_date,
        )
        item = self.repository.put(user_email, item)
        logger.info(f"Banked {item.id} for {user_email}")
        return item

    def list_for_user(self, user_email: str) -> List[BankedImage]:
        return self.repository.get(user_email)

    def approve(self, user_email: str, item_id: str) -> BankedImage:
        item = self.repository.find(user_email, item_id)
        if not item:
            raise BankItemNotFound(user_email, item_id)
        item.approved = True
        return self.repository.put(user_email, item)

    def delete(self, user_email: str, item_id: str) -> bool:
        return self.repository.remove(user_email, item_id)

    def promote(
        self,
        user_email: str,
        item_id: str,
        url: str,
        name: Optional[str],
        size: Optional[int],
        publish_date: str,
        publish_time: str,
        notes: Optional[str] = None,
        workspace_code: Optional[str] = None,
    ) -> QueueItem:
        """Move a banked image into the queue with a publish schedule."""
        if self.queue is None:
            raise ConfigurationError("Promotion needs a queue service")
        experience_type = resolve_experience_type(workspace_code)

        item = self.queue.find_by_bank_item(user_email, item_id)
        if item:
            logger.info(f"Bank item {item_id} already queued as {item.id}, skipping create")
        else:
            item = self.queue.register(
                user_email,
                url,
                name,
                size,
                notes=notes,
                publish_date=publish_date,
                publish_time=publish_time,
                experience_type=experience_type,
                bank_item_id=item_id,
            )

        if self.repository.remove(user_email, item_id):
            logger.info(f"Removed bank item {item_id} after promotion to {item.id}")
        return item
