# image_queue/services/upload.py
import os
from datetime import datetime, timezone
from typing import Callable

from image_queue.core.security import now_millis
from image_queue.schemas.upload import UploadResponse
from image_queue.services.cdn import CdnClient
from image_queue.services.media import MediaService, sanitize_file_name


class UploadPipeline:
    """Transcode an accepted upload and push it to the CDN."""

    def __init__(self, media: MediaService, cdn: CdnClient, clock: Callable[[], int] = now_millis):
        self.media = media
        self.cdn = cdn
        self.clock = clock

    def public_id_for(self, processed_file_name: str) -> str:
        stem, _ = os.path.splitext(processed_file_name)
        return f"upload_{self.clock()}_{sanitize_file_name(stem)}"

    def run(self, content: bytes, file_name: str, content_type: str) -> UploadResponse:
        """
        Raises TranscodeError when the image cannot be converted (not retried)
        and CdnUploadError when the CDN upload fails for good.
        """
        image = self.media.transcode(content, file_name)
        public_id = self.public_id_for(image.processed_file_name)
        result = self.cdn.upload(
            image.data,
            image.mime_type,
            public_id=public_id,
            file_name=sanitize_file_name(image.processed_file_name),
        )

        return UploadResponse(
            image_url=result.secure_url,
            public_id=result.public_id or public_id,
            original_file_name=file_name,
            processed_file_name=image.processed_file_name,
            original_file_type=content_type,
            processed_file_type=image.mime_type,
            original_file_size=image.original_size,
            processed_file_size=image.processed_size,
            compression_ratio=image.compression_ratio,
            width=image.width,
            height=image.height,
            upload_time=datetime.now(timezone.utc),
        )
