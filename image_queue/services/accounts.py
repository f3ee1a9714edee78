# image_queue/services/accounts.py
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from image_queue.core.config import settings
from image_queue.core.logging import logger
from image_queue.core.security import (
    TokenError,
    create_invite_token,
    create_reset_token,
    decode_invite_token,
    decode_reset_token,
    hash_password,
    is_valid_email,
    verify_password,
)
from image_queue.models.user import User
from image_queue.services.email import EmailDeliveryError, EmailService, invite_email, reset_password_email
from image_queue.services.workspaces import resolve_experience_type


class AccountError(Exception):
    """A user-facing failure of an account flow, with the HTTP status to report."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class PasswordResetOutcome:
    message: str
    email_sent: bool = False
    reset_link: Optional[str] = None


@dataclass
class InviteOutcome:
    invite_link: str
    email_sent: bool


@dataclass
class InviteAcceptance:
    user: User
    workspace_code: str
    experience_type: Optional[str]


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip()


class AccountService:
    """User accounts in the relational store, plus the reset and invite link flows."""

    def __init__(
        self,
        db: Session,
        email: Optional[EmailService] = None,
        public_base_url: str = "http://localhost:3000",
        min_password_length: int = 6,
    ):
        self.db = db
        self.email = email
        self.public_base_url = public_base_url.rstrip("/")
        self.min_password_length = min_password_length

    def get_user(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def require_user(self, email: str) -> User:
        user = self.get_user(email)
        if not user:
            raise AccountError("User not found", 404)
        return user

    def require_verified_user(self, email: str) -> User:
        user = self.require_user(email)
        if not user.is_verified:
            raise AccountError("User not verified", 403)
        return user

    def _validate_email(self, email: Optional[str]) -> str:
        email = normalize_email(email)
        if not email:
            raise AccountError("Email is required")
        if not is_valid_email(email):
            raise AccountError("Please enter a valid email address")
        return email

    def _validate_password(self, password: Optional[str]) -> str:
        if not password:
            raise AccountError("Password is required")
        if len(password) < self.min_password_length:
            raise AccountError(f"Password must be at least {self.min_password_length} characters long")
        return password

    def _save(self, user: User) -> User:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def _find_or_create(self, email: str) -> Tuple[User, bool]:
        user = self.get_user(email)
        if user:
            return user, False
        user = self._save(User(email=email, preferences={}, is_verified=False, is_paid=False))
        logger.info(f"Created user {email}")
        return user, True

    def login(self, email: Optional[str], password: Optional[str]) -> User:
        email = self._validate_email(email)
        if not password:
            raise AccountError("Password is required")

        user = self.get_user(email)
        if not user or not verify_password(password, user.hashed_password):
            raise AccountError("Invalid email or password", 401)

        user.last_login = datetime.utcnow()
        return self._save(user)

    def signup(self, email: Optional[str]) -> Tuple[User, bool]:
        return self._find_or_create(self._validate_email(email))

    def setup_account(
        self, email: Optional[str], password: Optional[str], workspace_code: Optional[str] = None
    ) -> Tuple[User, bool]:
        email = self._validate_email(email)
        password = self._validate_password(password)

        user, created = self._find_or_create(email)
        user.preferences = {
            **(user.preferences or {}),
            "hashedPassword": hash_password(password),
            "workspaceCode": workspace_code or None,
            "accountSetupComplete": True,
            "setupDate": datetime.utcnow().isoformat(),
        }
        return self._save(user), created

    def forgot_password(self, email: Optional[str]) -> PasswordResetOutcome:
        email = self._validate_email(email)
        if not self.get_user(email):
            # Same answer for unknown addresses
            return PasswordResetOutcome(
                message="If an account exists with this email, you will receive a password reset link."
            )

        reset_link = f"{self.public_base_url}/reset-password?token={create_reset_token(email)}"

        if self.email is None or not self.email.enabled:
            logger.warning(f"Email service not configured, returning reset link for {email} in the response")
            return PasswordResetOutcome(
                message="Password reset link created (email service not configured)",
                reset_link=reset_link,
            )

        subject, html, text = reset_password_email(reset_link)
        try:
            self.email.send(email, subject, html, text)
        except EmailDeliveryError as exc:
            raise AccountError(f"Failed to send email: {exc}", 500) from exc
        return PasswordResetOutcome(message="Password reset link sent to your email!", email_sent=True)

    def reset_password(self, token: Optional[str], password: Optional[str]) -> User:
        if not token:
            raise AccountError("Reset token is required")
        password = self._validate_password(password)
        try:
            decoded = decode_reset_token(token)
        except TokenError as exc:
            raise AccountError(str(exc)) from exc

        user = self.require_user(decoded.email)
        user.preferences = {
            **(user.preferences or {}),
            "hashedPassword": hash_password(password),
            "passwordResetDate": datetime.utcnow().isoformat(),
        }
        logger.info(f"Password reset for {user.email}")
        return self._save(user)

    def invite(
        self,
        email: Optional[str],
        workspace_code: Optional[str],
        message: Optional[str] = None,
        sender_email: Optional[str] = None,
    ) -> InviteOutcome:
        email = self._validate_email(email)
        if not workspace_code:
            raise AccountError("Workspace code is required")

        invite_link = f"{self.public_base_url}/accept-invite?token={create_invite_token(email, workspace_code)}"

        email_sent = False
        if self.email is not None and self.email.enabled:
            subject, html, text = invite_email(invite_link, workspace_code, sender_email, message)
            try:
                self.email.send(email, subject, html, text)
                email_sent = True
            except EmailDeliveryError as exc:
                logger.warning(f"Invite email to {email} not delivered: {exc}")
        else:
            logger.warning(f"Email service not configured, invite for {email} not emailed")

        return InviteOutcome(invite_link=invite_link, email_sent=email_sent)

    def accept_invite(self, token: Optional[str]) -> InviteAcceptance:
        if not token:
            raise AccountError("Invite token is required")
        try:
            decoded = decode_invite_token(token)
        except TokenError as exc:
            raise AccountError(str(exc)) from exc

        user, created = self._find_or_create(decoded.email)
        logger.info(f"{'New' if created else 'Existing'} user {user.email} accepted invite to {decoded.workspace_code}")
        return InviteAcceptance(
            user=user,
            workspace_code=decoded.workspace_code,
            experience_type=resolve_experience_type(decoded.workspace_code),
        )

    def verify(self, email: Optional[str]) -> User:
        email = normalize_email(email)
        if not email:
            raise AccountError("Email is required")
        user, _ = self._find_or_create(email)
        user.is_verified = True
        user.last_login = datetime.utcnow()
        return self._save(user)

    def profile(self, email: Optional[str]) -> User:
        email = normalize_email(email)
        if not email:
            raise AccountError("Email is required")
        user = self.require_user(email)
        user.last_login = datetime.utcnow()
        return self._save(user)
