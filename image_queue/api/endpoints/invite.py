# image_queue/api/endpoints/invite.py
from fastapi import APIRouter, Depends, HTTPException

from image_queue.api.deps import get_account_service
from image_queue.schemas.auth import InviteAcceptResponse, InviteRequest, InviteResponse
from image_queue.services.accounts import AccountError, AccountService

router = APIRouter()


@router.post("", response_model=InviteResponse)
def send_invite(body: InviteRequest, accounts: AccountService = Depends(get_account_service)):
    """
    Create a workspace invite link and email it when an email provider is
    configured. The link is returned either way.
    """
    try:
        outcome = accounts.invite(body.email, body.workspace_code, body.message, body.sender_email)
    except AccountError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)

    message = "Invitation sent successfully" if outcome.email_sent else "Invitation link created"
    return InviteResponse(invite_link=outcome.invite_link, email_sent=outcome.email_sent, message=message)


@router.get("/accept", response_model=InviteAcceptResponse)
def accept_invite(token: str = "", accounts: AccountService = Depends(get_account_service)):
    try:
        acceptance = accounts.accept_invite(token)
    except AccountError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)

    return InviteAcceptResponse(
        user_id=acceptance.user.id,
        email=acceptance.user.email,
        workspace_code=acceptance.workspace_code,
        experience_type=acceptance.experience_type,
    )
