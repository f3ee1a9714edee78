# image_queue/api/endpoints/admin.py
from typing import Optional

from fastapi import APIRouter, HTTPException, status

from image_queue.schemas.admin import AdminCheckResponse, WorkspacesResponse
from image_queue.schemas.user import EmailRequest
from image_queue.services.workspaces import AVAILABLE_WORKSPACES, is_admin

router = APIRouter()


@router.post("/check", response_model=AdminCheckResponse)
def check_admin(body: Optional[EmailRequest] = None):
    """Never fails; anything unrecognised is simply not an admin."""
    return AdminCheckResponse(is_admin=is_admin(body.email if body else None))


@router.post("/workspaces", response_model=WorkspacesResponse)
def list_workspaces(body: EmailRequest):
    if not is_admin(body.email):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized")
    return WorkspacesResponse(workspaces=AVAILABLE_WORKSPACES)
