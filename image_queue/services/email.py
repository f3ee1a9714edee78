# image_queue/services/email.py
from typing import Optional

import requests

from image_queue.core.logging import logger
from image_queue.services.transport import TransportError, send


class EmailDeliveryError(Exception):
    """The transactional email API refused or never received the message."""


class EmailService:
    """Sends transactional email through the Brevo REST API."""

    def __init__(
        self,
        api_key: Optional[str],
        sender_email: Optional[str],
        sender_name: str = "Workspace Team",
        api_url: str = "https://api.brevo.com/v3/smtp/email",
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.sender_email = sender_email
        self.sender_name = sender_name
        self.api_url = api_url
        self.session = session or requests.Session()

    @property
    def enabled(self) -> bool:
        return bool(self.api_key and self.sender_email)

    def send(self, to: str, subject: str, html: str, text: str) -> str:
        """Send one message; returns the provider's message id."""
        if not self.enabled:
            raise EmailDeliveryError("Email service is not configured")

        payload = {
            "sender": {"name": self.sender_name, "email": self.sender_email},
            "to": [{"email": to}],
            "subject": subject,
            "htmlContent": html,
            "textContent": text,
        }
        try:
            response = send(
                self.session,
                "POST",
                self.api_url,
                json=payload,
                headers={"api-key": self.api_key, "accept": "application/json"},
                timeout=30,
            )
        except TransportError as exc:
            logger.bind(kind=exc.kind.value).error(f"Failed to send '{subject}' to {to}: {exc.message}")
            raise EmailDeliveryError(exc.message) from exc

        message_id = response.json().get("messageId", "")
        logger.info(f"Sent '{subject}' to {to} ({message_id})")
        return message_id


def reset_password_email(reset_link: str) -> tuple:
    subject = "Reset Your Password"
    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2>Reset Your Password</h2>
  <p>You requested to reset your password. Click the button below to create a new password:</p>
  <div style="margin: 30px 0;">
    <a href="{reset_link}" style="background-color: #4F46E5; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; display: inline-block;">Reset Password</a>
  </div>
  <p>Or copy and paste this link into your browser:</p>
  <p style="background-color: #f5f5f5; padding: 12px; border-radius: 6px; word-break: break-all;">{reset_link}</p>
  <p style="color: #666; font-size: 14px; margin-top: 30px;">This link will expire in 1 hour.</p>
  <p style="color: #666; font-size: 14px;">If you didn't request this password reset, you can safely ignore this email.</p>
</div>
"""
    text = (
        "Reset Your Password\n\n"
        "You requested to reset your password. Open the link below to create a new password:\n\n"
        f"{reset_link}\n\n"
        "This link will expire in 1 hour.\n\n"
        "If you didn't request this password reset, you can safely ignore this email.\n"
    )
    return subject, html, text


def invite_email(invite_link: str, workspace_code: str, sender_email: Optional[str], message: Optional[str]) -> tuple:
    inviter = f"{sender_email} has invited you" if sender_email else "You've been invited"
    subject = "You've been invited to join a workspace"
    note_html = f"<p style=\"background-color: #f5f5f5; padding: 12px; border-radius: 6px;\">{message}</p>" if message else ""
    html = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2>{inviter} to join the {workspace_code} workspace</h2>
  {note_html}
  <div style="margin: 30px 0;">
    <a href="{invite_link}" style="background-color: #4F46E5; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; display: inline-block;">Accept Invitation</a>
  </div>
  <p style="word-break: break-all;">{invite_link}</p>
  <p style="color: #666; font-size: 14px;">This invitation expires in 30 days.</p>
</div>
"""
    text = (
        f"{inviter} to join the {workspace_code} workspace.\n\n"
        + (f"{message}\n\n" if message else "")
        + f"Accept the invitation: {invite_link}\n\n"
        "This invitation expires in 30 days.\n"
    )
    return subject, html, text
