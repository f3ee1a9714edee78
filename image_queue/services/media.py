# image_queue/services/media.py
import io
import math
import os
import re
from dataclasses import dataclass
from typing import BinaryIO, Optional

from PIL import Image as PILImage, ImageOps, UnidentifiedImageError

from image_queue.core.config import settings
from image_queue.core.logging import logger

TARGET_FORMAT = "WEBP"
TARGET_EXTENSION = "webp"
TARGET_MIME_TYPE = "image/webp"
WEBP_MAX_DIMENSION = 16383


class TranscodeError(ValueError):
    """The uploaded bytes could not be decoded or re-encoded."""


@dataclass
class TranscodedImage:
    data: bytes
    original_file_name: str
    processed_file_name: str
    original_size: int
    processed_size: int
    width: int
    height: int
    mime_type: str = TARGET_MIME_TYPE

    @property
    def compression_ratio(self) -> int:
        return compression_ratio(self.original_size, self.processed_size)


def compression_ratio(original_size: int, processed_size: int) -> int:
    """Percentage saved, rounded half up: round((1 - processed/original) * 100)."""
    if original_size <= 0:
        return 0
    return int(math.floor((1 - processed_size / original_size) * 100 + 0.5))


def measure(file: BinaryIO) -> int:
    """Size of a seekable file object without reading it."""
    file.seek(0, os.SEEK_END)
    size = file.tell()
    file.seek(0)
    return size


def with_extension(file_name: str, extension: str = TARGET_EXTENSION) -> str:
    stem, _ = os.path.splitext(file_name or "")
    return f"{stem or 'upload'}.{extension}"


def sanitize_file_name(file_name: str) -> str:
    """Make a filename safe to use as a remote identifier."""
    sanitized = re.sub(r'[\/\\:*?"<>|]', "_", file_name)
    sanitized = re.sub(r"[^a-zA-Z0-9._-]", "_", sanitized)
    sanitized = re.sub(r"_+", "_", sanitized)
    sanitized = sanitized.strip("_")
    return sanitized or "upload"


class MediaService:
    """Re-encodes uploaded images to WebP before they are sent to the CDN."""

    def __init__(
        self,
        quality: Optional[int] = None,
        method: Optional[int] = None,
        max_pixels: Optional[int] = None,
    ):
        self.quality = quality if quality is not None else settings.WEBP_QUALITY
        self.method = method if method is not None else settings.WEBP_METHOD
        self.max_pixels = max_pixels if max_pixels is not None else settings.MAX_IMAGE_PIXELS

    def check_dimensions(self, width: int, height: int) -> None:
        """Reject images that WebP cannot hold or that are too large to decode, from the header alone."""
        if width > WEBP_MAX_DIMENSION or height > WEBP_MAX_DIMENSION:
            raise TranscodeError(
                f"Image conversion failed: {width}x{height} exceeds WebP limit of {WEBP_MAX_DIMENSION} pixels"
            )
        if width * height > self.max_pixels:
            raise TranscodeError(
                f"Image conversion failed: {width}x{height} exceeds the limit of {self.max_pixels} pixels"
            )

    def transcode(self, content: bytes, file_name: str) -> TranscodedImage:
        if not content:
            raise TranscodeError("File buffer is empty")

        try:
            img = PILImage.open(io.BytesIO(content))
            self.check_dimensions(*img.size)
            img.load()
        except (UnidentifiedImageError, PILImage.DecompressionBombError, OSError) as e:
            logger.error(f"Error decoding image {file_name}: {str(e)}")
            raise TranscodeError(f"Could not read image: {str(e)}")

        try:
            img = ImageOps.exif_transpose(img)
            if img.mode not in ("RGB", "RGBA"):
                has_alpha = img.mode in ("LA", "PA") or (img.mode == "P" and "transparency" in img.info)
                img = img.convert("RGBA" if has_alpha else "RGB")

            output = io.BytesIO()
            img.save(output, format=TARGET_FORMAT, quality=self.quality, method=self.method)
        except (OSError, ValueError) as e:
            logger.error(f"Error encoding {file_name} to {TARGET_FORMAT}: {str(e)}")
            raise TranscodeError(f"Image conversion failed: {str(e)}")

        data = output.getvalue()
        width, height = img.size
        transcoded = TranscodedImage(
            data=data,
            original_file_name=file_name,
            processed_file_name=with_extension(file_name),
            original_size=len(content),
            processed_size=len(data),
            width=width,
            height=height,
        )
        logger.info(
            f"Transcoded {file_name}: {transcoded.original_size} -> {transcoded.processed_size} bytes "
            f"({transcoded.compression_ratio}% smaller)"
        )
        return transcoded
