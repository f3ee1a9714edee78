# image_queue/db/base.py
from image_queue.db.session import Base

# Import all models so they are registered on Base.metadata
from image_queue.models.user import User
from image_queue.models.bank import BankedImage
