# image_queue/schemas/bank.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from image_queue.schemas.base import BaseSchema, CamelModel
from image_queue.schemas.queue import ImageData


class BankedItem(BaseSchema):
    id: str
    user_email: str
    image_url: str
    file_name: str
    file_size: int = 0
    owner: str = ""
    notes: str = ""
    tags: List[str] = Field(default_factory=list)
    approved: bool = False
    publish_date: Optional[str] = None
    upload_date: Optional[datetime] = None


class BankImageData(CamelModel):
    url: Optional[str] = None
    name: Optional[str] = None
    size: Optional[int] = 0
    notes: Optional[str] = None
    owner: Optional[str] = None
    tags: Optional[List[str]] = None
    publish_date: Optional[str] = None


class BankAddRequest(CamelModel):
    email: Optional[str] = None
    image_data: Optional[BankImageData] = None


class BankItemRequest(CamelModel):
    email: Optional[str] = None
    record_id: Optional[str] = None


class BankStatusRequest(CamelModel):
    email: Optional[str] = None


class MoveToQueueRequest(CamelModel):
    email: Optional[str] = None
    record_id: Optional[str] = None
    publish_date: Optional[str] = None
    publish_time: Optional[str] = None
    image_data: Optional[ImageData] = None
    workspace_code: Optional[str] = None


class BankedItemResponse(CamelModel):
    success: bool = True
    banked_item: BankedItem


class BankListResponse(CamelModel):
    success: bool = True
    banked_items: List[BankedItem]
