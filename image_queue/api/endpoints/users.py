# image_queue/api/endpoints/users.py
from fastapi import APIRouter, Depends, HTTPException, status

from image_queue.api.deps import get_account_service, get_user_directory
from image_queue.core.logging import logger
from image_queue.schemas.user import EmailRequest, ProfileResponse, UserProfile, VerifyResponse
from image_queue.services.accounts import AccountError, AccountService
from image_queue.services.directory import UserDirectory
from image_queue.services.record_store import RecordStoreError

router = APIRouter()


@router.post("/verify", response_model=VerifyResponse)
def verify_user(
    body: EmailRequest,
    accounts: AccountService = Depends(get_account_service),
    directory: UserDirectory = Depends(get_user_directory),
):
    """
    Find or create the user, mark them verified and mirror the result to
    the remote Users table.
    """
    try:
        user = accounts.verify(body.email)
    except AccountError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)

    try:
        directory.mirror(user)
    except RecordStoreError as exc:
        logger.error(f"Verified {user.email} but could not mirror to remote Users: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to verify user", "details": str(exc)},
        )

    return VerifyResponse(is_verified=user.is_verified, user=UserProfile.model_validate(user))


@router.post("/profile", response_model=ProfileResponse)
def user_profile(body: EmailRequest, accounts: AccountService = Depends(get_account_service)):
    try:
        user = accounts.profile(body.email)
    except AccountError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    return ProfileResponse(user=UserProfile.model_validate(user))
