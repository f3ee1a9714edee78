import io
from unittest.mock import MagicMock

import pytest
import requests
from PIL import Image as PILImage
from urllib3.exceptions import ProtocolError

from image_queue.api import deps
from image_queue.core.logging import logger
from image_queue.main import app
from image_queue.services.cdn import CdnClient
from image_queue.services.media import MediaService
from image_queue.services.upload import UploadPipeline
from tests.test_services.test_transport import fake_response

URL = "/api/upload"
SUCCESS = {
    "secure_url": "https://res.cloudinary.com/demo/image/upload/upload_1_photo.webp",
    "public_id": "upload_1_photo",
}


@pytest.fixture
def cdn_session() -> MagicMock:
    session = MagicMock()
    session.request.return_value = fake_response(200, SUCCESS)
    return session


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def upload_client(client, cdn_session, sleeps):
    cdn = CdnClient("demo", "ml_default", session=cdn_session, sleep=sleeps.append)
    app.dependency_overrides[deps.get_upload_pipeline] = lambda: UploadPipeline(MediaService(), cdn)
    return client


def post_file(client, content, name="photo.png", content_type="image/png"):
    return client.post(URL, files={"file": (name, content, content_type)})


def test_converts_and_uploads(upload_client, cdn_session, png_bytes):
    response = post_file(upload_client, png_bytes)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["imageUrl"] == SUCCESS["secure_url"]
    assert body["originalFileName"] == "photo.png"
    assert body["processedFileName"] == "photo.webp"
    assert body["originalFileType"] == "image/png"
    assert body["processedFileType"] == "image/webp"
    assert body["originalFileSize"] == len(png_bytes)
    assert isinstance(body["compressionRatio"], int)
    assert cdn_session.request.call_count == 1


def test_oversized_file_never_reaches_cdn(upload_client, cdn_session):
    content = b"\0" * (10 * 1024 * 1024 + 1)

    response = post_file(upload_client, content, name="huge.png")

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "File size must be less than 10MB"
    assert body["receivedSize"] == len(content)
    assert body["maxSize"] == 10 * 1024 * 1024
    cdn_session.request.assert_not_called()


def test_retries_connection_reset(upload_client, cdn_session, sleeps, jpeg_bytes):
    reset = requests.ConnectionError(
        ProtocolError("Connection aborted.", ConnectionResetError(104, "Connection reset by peer"))
    )
    cdn_session.request.side_effect = [reset, reset, fake_response(200, SUCCESS)]

    response = post_file(upload_client, jpeg_bytes, name="photo.jpg", content_type="image/jpeg")

    assert response.status_code == 200
    assert cdn_session.request.call_count == 3
    assert sleeps == [2.0, 4.0]


def test_cdn_rejection_is_not_retried(upload_client, cdn_session, sleeps, png_bytes):
    cdn_session.request.return_value = fake_response(
        422, {"error": {"message": "Invalid image file"}}, "Unprocessable Entity"
    )

    response = post_file(upload_client, png_bytes)

    assert response.status_code == 500
    body = response.json()
    assert body["errorType"] == "http_4xx"
    assert body["attempts"] == 1
    assert body["retryable"] is True
    assert "Invalid image file" in body["error"]
    assert sleeps == []


def test_retries_exhausted(upload_client, cdn_session, png_bytes):
    cdn_session.request.side_effect = requests.exceptions.ConnectTimeout("timed out")

    response = post_file(upload_client, png_bytes)

    assert response.status_code == 500
    body = response.json()
    assert body["attempts"] == 3
    assert body["errorType"] == "timeout"
    assert body["error"].endswith("Please check your connection and try again.")


def test_requires_multipart(upload_client, cdn_session):
    response = upload_client.post(URL, json={"file": "nope"})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid content type. Expected multipart/form-data"
    assert response.json()["receivedContentType"] == "application/json"
    cdn_session.request.assert_not_called()


def test_requires_file_field(upload_client):
    response = upload_client.post(URL, data={"caption": "hi"}, files={"other": ("a.png", b"x", "image/png")})

    assert response.status_code == 400
    assert response.json()["error"] == "No file provided in request"
    assert sorted(response.json()["availableFields"]) == ["caption", "other"]


def test_rejects_non_image(upload_client, cdn_session):
    response = post_file(upload_client, b"%PDF-1.4", name="doc.pdf", content_type="application/pdf")

    assert response.status_code == 400
    assert response.json()["error"] == "File must be an image"
    cdn_session.request.assert_not_called()


def test_rejects_undecodable_image(upload_client, cdn_session):
    response = post_file(upload_client, b"", name="empty.png")

    assert response.status_code == 400
    assert "empty" in response.json()["error"]
    cdn_session.request.assert_not_called()


def test_unconfigured_cdn(client, png_bytes):
    response = post_file(client, png_bytes)

    assert response.status_code == 500
    assert response.json() == {"error": "Cloudinary configuration missing"}


@pytest.fixture
def warnings_logged():
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


def test_file_of_exactly_max_size_is_accepted(upload_client, cdn_session, jpeg_bytes, warnings_logged):
    # JPEG decoders stop at the end-of-image marker, so trailing padding is ignored
    max_size = 10 * 1024 * 1024
    content = jpeg_bytes + b"\0" * (max_size - len(jpeg_bytes))

    response = post_file(upload_client, content, name="padded.jpg", content_type="image/jpeg")

    assert response.status_code == 200
    assert response.json()["originalFileSize"] == max_size
    assert cdn_session.request.call_count == 1
    assert any(message.startswith("Large upload padded.jpg") for message in warnings_logged)


def test_small_file_logs_no_size_warning(upload_client, png_bytes, warnings_logged):
    response = post_file(upload_client, png_bytes)

    assert response.status_code == 200
    assert not any(message.startswith("Large upload") for message in warnings_logged)


def test_decompression_bomb_is_a_conversion_failure(upload_client, cdn_session):
    # 180M one-bit pixels compress to a few KB of PNG
    buffer = io.BytesIO()
    PILImage.new("1", (20000, 9000)).save(buffer, format="PNG")

    response = post_file(upload_client, buffer.getvalue(), name="bomb.png")

    assert response.status_code == 400
    assert response.json()["error"].startswith("Could not read image")
    cdn_session.request.assert_not_called()


def test_image_wider_than_webp_limit_is_rejected_before_decoding(upload_client, cdn_session):
    buffer = io.BytesIO()
    PILImage.new("RGB", (17000, 10)).save(buffer, format="PNG")

    response = post_file(upload_client, buffer.getvalue(), name="panorama.png")

    assert response.status_code == 400
    assert "exceeds WebP limit of 16383 pixels" in response.json()["error"]
    cdn_session.request.assert_not_called()


@pytest.mark.parametrize("payload", [{"public_id": "upload_1_photo"}, ["unexpected"]])
def test_success_without_image_url_is_an_upload_failure(upload_client, cdn_session, sleeps, png_bytes, payload):
    cdn_session.request.return_value = fake_response(200, payload)

    response = post_file(upload_client, png_bytes)

    assert response.status_code == 500
    body = response.json()
    assert body["errorType"] == "http_5xx"
    assert body["attempts"] == 1
    assert body["retryable"] is True
    assert body["error"] == "Image upload failed: Image service returned an invalid response"
    assert sleeps == []


def test_success_with_unparseable_body_is_an_upload_failure(upload_client, cdn_session, png_bytes):
    response = fake_response(200)
    response.json.side_effect = ValueError("Expecting value: line 1 column 1 (char 0)")
    cdn_session.request.return_value = response

    result = post_file(upload_client, png_bytes)

    assert result.status_code == 500
    assert result.json()["errorType"] == "http_5xx"
    assert result.json()["retryable"] is True
