# image_queue/api/endpoints/auth.py
from fastapi import APIRouter, Depends, HTTPException

from image_queue.api.deps import get_account_service
from image_queue.core.logging import logger
from image_queue.schemas.auth import (
    AccountResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    SetupAccountRequest,
    SignupRequest,
)
from image_queue.schemas.queue import MessageResponse
from image_queue.services.accounts import AccountError, AccountService

router = APIRouter()


def _account_error(exc: AccountError) -> HTTPException:
    if exc.status_code >= 500:
        logger.error(exc.message)
    return HTTPException(status_code=exc.status_code, detail=exc.message)


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, accounts: AccountService = Depends(get_account_service)):
    try:
        user = accounts.login(body.email, body.password)
    except AccountError as exc:
        raise _account_error(exc)
    return LoginResponse(user_id=user.id, email=user.email, workspace_code=user.workspace_code)


@router.post("/signup", response_model=AccountResponse)
def signup(body: SignupRequest, accounts: AccountService = Depends(get_account_service)):
    try:
        user, created = accounts.signup(body.email)
    except AccountError as exc:
        raise _account_error(exc)
    return AccountResponse(
        user_id=user.id,
        email=user.email,
        message="User created successfully" if created else "User found successfully",
    )


@router.post("/setup-account", response_model=AccountResponse)
def setup_account(body: SetupAccountRequest, accounts: AccountService = Depends(get_account_service)):
    try:
        user, created = accounts.setup_account(body.email, body.password, body.workspace_code)
    except AccountError as exc:
        raise _account_error(exc)
    if created:
        message = "Account created successfully! You can now login with your email and password."
    else:
        message = "Account setup complete! You can now login with your email and password."
    return AccountResponse(user_id=user.id, email=user.email, message=message)


@router.post("/forgot-password", response_model=ForgotPasswordResponse, response_model_exclude_none=True)
def forgot_password(body: ForgotPasswordRequest, accounts: AccountService = Depends(get_account_service)):
    try:
        outcome = accounts.forgot_password(body.email)
    except AccountError as exc:
        raise _account_error(exc)
    return ForgotPasswordResponse(message=outcome.message, reset_link=outcome.reset_link)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(body: ResetPasswordRequest, accounts: AccountService = Depends(get_account_service)):
    try:
        accounts.reset_password(body.token, body.password)
    except AccountError as exc:
        raise _account_error(exc)
    return MessageResponse(message="Password has been reset successfully!")
