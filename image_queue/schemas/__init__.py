from image_queue.schemas.record import RemoteRecord
from image_queue.schemas.queue import QueueItem, RecordDecodeError
from image_queue.schemas.bank import BankedItem
from image_queue.schemas.notification import Notification
from image_queue.schemas.upload import UploadResponse
from image_queue.schemas.user import UserProfile
