# image_queue/services/cdn.py
import base64
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import requests

from image_queue.core.logging import logger
from image_queue.services.transport import TransportError, TransportErrorKind, send

NETWORK_MESSAGES = {
    TransportErrorKind.CONNECTION_RESET: (
        "The connection was reset while uploading your image. Please check your connection and try again."
    ),
    TransportErrorKind.TIMEOUT: (
        "The upload took too long and timed out. Please check your connection and try again."
    ),
    TransportErrorKind.DNS_FAILURE: (
        "We couldn't reach the image service. Please check your connection and try again."
    ),
    TransportErrorKind.NETWORK: (
        "A network error interrupted the upload. Please check your connection and try again."
    ),
}


def user_message(error: TransportError) -> str:
    """Non-technical message for a failed upload."""
    if error.kind in NETWORK_MESSAGES:
        return NETWORK_MESSAGES[error.kind]
    return f"Image upload failed: {error.message}"


class CdnUploadError(Exception):
    def __init__(self, error: TransportError, attempts: int):
        super().__init__(error.message)
        self.error = error
        self.attempts = attempts

    @property
    def kind(self) -> TransportErrorKind:
        return self.error.kind

    @property
    def user_message(self) -> str:
        return user_message(self.error)


@dataclass
class CdnUploadResult:
    secure_url: str
    public_id: Optional[str]
    attempts: int
    raw: Dict[str, Any]


def to_data_uri(data: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


class CdnClient:
    """
    Unsigned uploads to the media CDN (Cloudinary upload API).

    Network-level failures (reset, timeout, DNS, other connection errors)
    are retried with exponential backoff; HTTP error responses are not.
    Attempts that fail after the CDN stored the blob are not cleaned up.
    """

    def __init__(
        self,
        cloud_name: str,
        upload_preset: str,
        upload_url: str = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload",
        timeout: float = 120.0,
        max_attempts: int = 3,
        base_delay: float = 2.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.upload_url = upload_url.format(cloud_name=cloud_name)
        self.upload_preset = upload_preset
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.base_delay = base_delay
        self.session = session or requests.Session()
        self.sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        """Delay after the given 1-based failed attempt: base, 2*base, 4*base..."""
        return self.base_delay * (2 ** (attempt - 1))

    @staticmethod
    def parse_result(response: requests.Response) -> Optional[Dict[str, Any]]:
        """JSON body of a successful upload, or None when it carries no usable URL."""
        try:
            result = response.json()
        except ValueError:
            return None
        if not isinstance(result, dict) or not (result.get("secure_url") or result.get("url")):
            return None
        return result

    def upload(self, data: bytes, mime_type: str, public_id: str, file_name: str) -> CdnUploadResult:
        form = {
            "file": to_data_uri(data, mime_type),
            "upload_preset": self.upload_preset,
            "public_id": public_id,
            "filename_override": file_name,
        }
        logger.info(
            f"Uploading {file_name} to CDN as {public_id} (data URI length {len(form['file'])})"
        )

        attempt = 0
        while True:
            attempt += 1
            try:
                response = send(self.session, "POST", self.upload_url, data=form, timeout=self.timeout)
            except TransportError as exc:
                if not exc.is_network:
                    logger.bind(status_code=exc.status_code).error(
                        f"CDN rejected upload of {file_name}: {exc.message}"
                    )
                    raise CdnUploadError(exc, attempt) from exc
                if attempt >= self.max_attempts:
                    logger.error(f"CDN upload of {file_name} failed after {attempt} attempts: {exc.kind.value}")
                    raise CdnUploadError(exc, attempt) from exc

                delay = self.backoff_delay(attempt)
                logger.warning(
                    f"CDN upload attempt {attempt}/{self.max_attempts} for {file_name} failed "
                    f"({exc.kind.value}), retrying in {delay:.1f}s"
                )
                self.sleep(delay)
                continue

            result = self.parse_result(response)
            if result is None:
                logger.bind(status_code=response.status_code).error(
                    f"CDN accepted upload of {file_name} but returned no image URL"
                )
                error = TransportError(
                    TransportErrorKind.HTTP_5XX,
                    "Image service returned an invalid response",
                    status_code=response.status_code,
                )
                raise CdnUploadError(error, attempt)

            logger.info(f"CDN upload of {file_name} succeeded on attempt {attempt}")
            return CdnUploadResult(
                secure_url=result.get("secure_url") or result.get("url"),
                public_id=result.get("public_id"),
                attempts=attempt,
                raw=result,
            )
