# Import models here so they can be imported from image_queue.models
from image_queue.models.user import User
from image_queue.models.bank import BankedImage
