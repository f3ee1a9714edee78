from typing import Dict, List

from image_queue.schemas.base import CamelModel


class AdminCheckResponse(CamelModel):
    is_admin: bool


class WorkspacesResponse(CamelModel):
    workspaces: List[Dict[str, str]]
