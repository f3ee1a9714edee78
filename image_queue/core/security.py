# image_queue/core/security.py
import base64
import binascii
import secrets
import string
import time
from dataclasses import dataclass
from typing import Optional

from email_validator import validate_email, EmailNotValidError
from passlib.context import CryptContext

from image_queue.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class TokenError(ValueError):
    """A reset or invite token is malformed or expired."""


@dataclass
class ResetToken:
    email: str
    issued_at: int


@dataclass
class InviteToken:
    email: str
    workspace_code: str
    issued_at: int


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Stored value is not a recognised hash
        return False


def is_valid_email(email: Optional[str]) -> bool:
    if not email or not isinstance(email, str):
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def generate_secure_random_string(length: int = 9) -> str:
    """Generate a secure random lower-case alphanumeric string."""
    alphabet = string.ascii_lowercase + string.digits
    return ''.join(secrets.choice(alphabet) for _ in range(length))


def now_millis() -> int:
    return int(time.time() * 1000)


def _encode(*parts: str) -> str:
    return base64.b64encode(":".join(parts).encode("utf-8")).decode("ascii")


def _decode(token: str, invalid_message: str) -> list:
    # '+' arrives as a space when the link was not URL-encoded
    token = token.strip().replace(" ", "+")
    try:
        decoded = base64.b64decode(token, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        raise TokenError(invalid_message)
    return decoded.split(":")


def _parse_timestamp(raw: str, format_message: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise TokenError(format_message)


def create_reset_token(email: str, issued_at: Optional[int] = None) -> str:
    """
    Password reset token: base64("email:unixMillis").
    Not signed; possession of the link is the trust boundary.
    """
    return _encode(email, str(issued_at if issued_at is not None else now_millis()))


def decode_reset_token(token: str, now: Optional[int] = None) -> ResetToken:
    parts = _decode(token, "Invalid reset token")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise TokenError("Invalid reset token format")

    issued_at = _parse_timestamp(parts[1], "Invalid reset token format")
    age = (now if now is not None else now_millis()) - issued_at
    if age > settings.RESET_TOKEN_TTL_SECONDS * 1000:
        raise TokenError("Reset link has expired. Please request a new one.")

    return ResetToken(email=parts[0], issued_at=issued_at)


def create_invite_token(email: str, workspace_code: str, issued_at: Optional[int] = None) -> str:
    """Workspace invite token: base64("email:workspaceCode:unixMillis")."""
    return _encode(email, workspace_code, str(issued_at if issued_at is not None else now_millis()))


def decode_invite_token(token: str, now: Optional[int] = None) -> InviteToken:
    parts = _decode(token, "Invalid invite token")
    if len(parts) < 3 or not all(parts[:3]):
        raise TokenError("Invalid invite token format")

    issued_at = _parse_timestamp(parts[2], "Invalid invite token format")
    age = (now if now is not None else now_millis()) - issued_at
    if age > settings.INVITE_TOKEN_TTL_SECONDS * 1000:
        raise TokenError("Invite link has expired. Please request a new invitation.")

    if not is_valid_email(parts[0]):
        raise TokenError("Invalid email in invite token")

    return InviteToken(email=parts[0], workspace_code=parts[1], issued_at=issued_at)
