# image_queue/services/workspaces.py
from typing import Dict, List, Mapping, Optional

from image_queue.core.config import settings

AVAILABLE_WORKSPACES: List[Dict[str, str]] = [
    {"code": "homegrown", "name": "Homegrown National Park", "theme": "healthcare"},
    {"code": "contemplay", "name": "ContemPlay", "theme": "tech"},
    {"code": "corporate", "name": "Corporate Workspace", "theme": "corporate"},
    {"code": "academic", "name": "Academic Workspace", "theme": "academic"},
]


def resolve_experience_type(
    workspace_code: Optional[str], table: Optional[Mapping[str, str]] = None
) -> Optional[str]:
    """
    Map a workspace code to its experience-type record id.
    Lookup is case-insensitive; unknown or empty codes resolve to None.
    """
    if not workspace_code:
        return None
    mapping = settings.EXPERIENCE_TYPES if table is None else table
    return {code.lower(): ref for code, ref in mapping.items()}.get(workspace_code.strip().lower())


def is_admin(email: Optional[str], admin_email: Optional[str] = None) -> bool:
    admin_email = admin_email if admin_email is not None else settings.ADMIN_EMAIL
    if not email or not admin_email:
        return False
    return email.strip().lower() == admin_email.strip().lower()
