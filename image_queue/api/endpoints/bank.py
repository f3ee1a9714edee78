# image_queue/api/endpoints/bank.py
from fastapi import APIRouter, Depends, HTTPException, status

from image_queue.api.deps import get_account_service, get_bank_service, get_promotion_service
from image_queue.core.logging import logger
from image_queue.schemas.bank import (
    BankAddRequest,
    BankedItem,
    BankedItemResponse,
    BankItemRequest,
    BankListResponse,
    BankStatusRequest,
    MoveToQueueRequest,
)
from image_queue.schemas.queue import MessageResponse, QueueItemResponse, RecordDecodeError
from image_queue.services.accounts import AccountError, AccountService
from image_queue.services.bank import BankItemNotFound, BankService
from image_queue.services.record_store import RecordStoreError

router = APIRouter()


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


@router.post("/add", response_model=BankedItemResponse)
def add_to_bank(body: BankAddRequest, bank: BankService = Depends(get_bank_service)):
    image = body.image_data
    if not body.email or not image or not image.url or not image.name:
        raise _bad_request("Email and image data are required")

    item = bank.add(
        body.email,
        image.url,
        image.name,
        size=image.size,
        notes=image.notes,
        owner=image.owner,
        tags=image.tags,
        publish_date=image.publish_date,
    )
    return BankedItemResponse(banked_item=BankedItem.model_validate(item))


@router.post("/status", response_model=BankListResponse)
def bank_status(body: BankStatusRequest, bank: BankService = Depends(get_bank_service)):
    if not body.email:
        raise _bad_request("Email is required")
    items = bank.list_for_user(body.email)
    return BankListResponse(banked_items=[BankedItem.model_validate(item) for item in items])


@router.post("/approve", response_model=BankedItemResponse)
def approve_banked_item(body: BankItemRequest, bank: BankService = Depends(get_bank_service)):
    if not body.email or not body.record_id:
        raise _bad_request("Email and record ID are required")
    try:
        item = bank.approve(body.email, body.record_id)
    except BankItemNotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Banked item not found")
    return BankedItemResponse(banked_item=BankedItem.model_validate(item))


@router.post("/delete", response_model=MessageResponse)
def delete_banked_item(body: BankItemRequest, bank: BankService = Depends(get_bank_service)):
    if not body.email or not body.record_id:
        raise _bad_request("Email and record ID are required")
    if not bank.delete(body.email, body.record_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Banked item not found")
    return MessageResponse(message="Banked item deleted")


@router.post("/move-to-queue", response_model=QueueItemResponse)
def move_to_queue(
    body: MoveToQueueRequest,
    accounts: AccountService = Depends(get_account_service),
    bank: BankService = Depends(get_promotion_service),
):
    """
    Promote a banked image into the publish queue with a schedule.

    The bank entry is removed once the queue record exists. Repeating the
    call for the same recordId returns the already-queued record.
    """
    if not body.email:
        raise _bad_request("Email is required")
    if not body.record_id:
        raise _bad_request("Record ID is required")
    image = body.image_data
    if not image or not image.url:
        raise _bad_request("Image data is required")
    if not body.publish_date:
        raise _bad_request("Publish date is required")
    if not body.publish_time:
        raise _bad_request("Publish time is required")

    try:
        accounts.require_verified_user(body.email)
    except AccountError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)

    try:
        item = bank.promote(
            body.email,
            body.record_id,
            image.url,
            image.name,
            image.size,
            publish_date=body.publish_date,
            publish_time=body.publish_time,
            notes=image.notes,
            workspace_code=body.workspace_code,
        )
    except (RecordStoreError, RecordDecodeError) as exc:
        logger.error(f"Failed to move {body.record_id} to queue for {body.email}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to move image to queue", "details": str(exc)},
        )

    return QueueItemResponse(queue_item=item)
