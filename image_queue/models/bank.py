from sqlalchemy import Column, Integer, String, DateTime, Boolean, JSON, func

from image_queue.db.session import Base


class BankedImage(Base):
    __tablename__ = "banked_images"

    id = Column(String, primary_key=True, index=True)
    user_email = Column(String, index=True, nullable=False)
    image_url = Column(String, nullable=False)
    file_name = Column(String, nullable=False)
    file_size = Column(Integer, nullable=False, default=0)
    owner = Column(String, nullable=False, default="")
    notes = Column(String, nullable=False, default="")
    tags = Column(JSON, nullable=True)
    approved = Column(Boolean, nullable=False, default=False)
    publish_date = Column(String, nullable=True)
    upload_date = Column(DateTime, server_default=func.now())
