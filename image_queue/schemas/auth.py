from typing import Optional

from image_queue.schemas.base import CamelModel


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(CamelModel):
    success: bool = True
    user_id: int
    email: str
    workspace_code: Optional[str] = None
    message: str = "Login successful"


class SignupRequest(CamelModel):
    email: Optional[str] = None


class SetupAccountRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None
    workspace_code: Optional[str] = None


class AccountResponse(CamelModel):
    success: bool = True
    user_id: int
    email: str
    message: str


class ForgotPasswordRequest(CamelModel):
    email: Optional[str] = None


class ForgotPasswordResponse(CamelModel):
    success: bool = True
    message: str
    # Only returned when no email provider is configured
    reset_link: Optional[str] = None


class ResetPasswordRequest(CamelModel):
    token: Optional[str] = None
    password: Optional[str] = None


class InviteRequest(CamelModel):
    email: Optional[str] = None
    message: Optional[str] = None
    workspace_code: Optional[str] = None
    sender_email: Optional[str] = None


class InviteResponse(CamelModel):
    success: bool = True
    invite_link: str
    email_sent: bool
    message: str


class InviteAcceptResponse(CamelModel):
    success: bool = True
    user_id: int
    email: str
    workspace_code: str
    experience_type: Optional[str] = None
    message: str = "Welcome! You're now logged in."
