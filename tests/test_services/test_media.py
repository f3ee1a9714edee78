"""Tests for WebP transcoding and filename handling."""
import io
import math

import pytest
from PIL import Image as PILImage

from image_queue.services.media import (
    MediaService,
    TARGET_MIME_TYPE,
    TranscodeError,
    compression_ratio,
    sanitize_file_name,
    with_extension,
)
from tests.fakes import image_bytes


@pytest.fixture
def media() -> MediaService:
    return MediaService(quality=90, method=6)


@pytest.mark.parametrize("fmt", ["PNG", "JPEG", "GIF", "BMP"])
def test_any_input_format_becomes_webp(media, fmt):
    content = image_bytes(fmt)
    result = media.transcode(content, f"photo.{fmt.lower()}")

    assert result.mime_type == TARGET_MIME_TYPE
    assert result.processed_file_name == "photo.webp"
    assert PILImage.open(io.BytesIO(result.data)).format == "WEBP"
    assert (result.width, result.height) == (64, 48)


def test_compression_ratio_matches_reference(media):
    content = image_bytes("PNG", size=(200, 200))
    result = media.transcode(content, "square.png")

    expected = math.floor((1 - result.processed_size / result.original_size) * 100 + 0.5)
    assert result.original_size == len(content)
    assert result.processed_size == len(result.data)
    assert result.compression_ratio == expected


def test_compression_ratio_rounds_half_up():
    assert compression_ratio(8, 7) == 13  # 12.5
    assert compression_ratio(1000, 250) == 75
    assert compression_ratio(100, 150) == -50
    assert compression_ratio(0, 10) == 0


def test_empty_buffer_is_rejected(media):
    with pytest.raises(TranscodeError, match="empty"):
        media.transcode(b"", "empty.png")


def test_garbage_bytes_are_rejected(media):
    with pytest.raises(TranscodeError):
        media.transcode(b"definitely not an image", "fake.jpg")


def test_palette_image_with_transparency(media):
    img = PILImage.new("P", (10, 10))
    img.info["transparency"] = 0
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")

    result = media.transcode(buffer.getvalue(), "icon.png")

    assert PILImage.open(io.BytesIO(result.data)).mode == "RGBA"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("My Photo (1).webp", "My_Photo_1_.webp"),
        ("../../etc/passwd", ".._.._etc_passwd"),
        ("résumé:final?.webp", "r_sum_final_.webp"),
        ("***", "upload"),
    ],
)
def test_sanitize_file_name(name, expected):
    assert sanitize_file_name(name) == expected


def test_with_extension():
    assert with_extension("holiday.final.jpeg") == "holiday.final.webp"
    assert with_extension("") == "upload.webp"


def test_wider_than_webp_limit_is_rejected(media):
    with pytest.raises(TranscodeError, match="exceeds WebP limit of 16383 pixels"):
        media.transcode(image_bytes("PNG", size=(17000, 10)), "panorama.png")


def test_pixel_cap_is_checked_from_the_header():
    media = MediaService(max_pixels=1000)

    with pytest.raises(TranscodeError, match="exceeds the limit of 1000 pixels"):
        media.transcode(image_bytes("PNG"), "photo.png")


def test_decompression_bomb_is_a_transcode_error(media, monkeypatch):
    monkeypatch.setattr(PILImage, "MAX_IMAGE_PIXELS", 1000)

    with pytest.raises(TranscodeError, match="Could not read image"):
        media.transcode(image_bytes("PNG"), "bomb.png")
