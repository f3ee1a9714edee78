# image_queue/schemas/user.py
from datetime import datetime
from typing import Optional

from image_queue.schemas.base import BaseSchema, CamelModel


class UserProfile(BaseSchema):
    id: int
    email: str
    is_verified: bool = False
    is_paid: bool = False
    subscription_tier: str = "free"
    workspace_code: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class EmailRequest(CamelModel):
    email: Optional[str] = None


class VerifyResponse(CamelModel):
    is_verified: bool
    user: UserProfile


class ProfileResponse(CamelModel):
    success: bool = True
    user: UserProfile
