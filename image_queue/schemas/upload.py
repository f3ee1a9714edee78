from datetime import datetime

from image_queue.schemas.base import CamelModel


class UploadResponse(CamelModel):
    success: bool = True
    image_url: str
    public_id: str
    original_file_name: str
    processed_file_name: str
    original_file_type: str
    processed_file_type: str
    original_file_size: int
    processed_file_size: int
    compression_ratio: int
    width: int
    height: int
    upload_time: datetime
