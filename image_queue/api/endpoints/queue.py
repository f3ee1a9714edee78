# image_queue/api/endpoints/queue.py
from numbers import Number
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from image_queue.api.deps import get_account_service, get_queue_service
from image_queue.core.logging import logger
from image_queue.schemas.queue import (
    BulkAddRequest,
    BulkAddResponse,
    BulkResult,
    BulkSummary,
    DeleteRequest,
    MessageResponse,
    ProcessingTimeRequest,
    QueueAddRequest,
    QueueItemResponse,
    QueueListResponse,
    QueueStatusRequest,
    QueueUpdateRequest,
    RecordDecodeError,
    ReorderRequest,
    TagsRequest,
)
from image_queue.services.accounts import AccountError, AccountService
from image_queue.services.queue import QueueService
from image_queue.services.record_store import RecordStoreError
from image_queue.services.workspaces import resolve_experience_type

router = APIRouter()

BULK_DEFAULT_NAME = "Uploaded Image"
BULK_DEFAULT_NOTES = "Uploaded via web interface"


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def _upstream_failure(message: str, exc: Exception) -> HTTPException:
    logger.error(f"{message}: {exc}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": message, "details": str(exc)},
    )


@router.post("/add", response_model=QueueItemResponse)
def add_to_queue(
    body: QueueAddRequest,
    accounts: AccountService = Depends(get_account_service),
    queue: QueueService = Depends(get_queue_service),
):
    """
    Queue an uploaded image for a verified user at the end of their queue.
    """
    image = body.image_data
    if not body.email or not image or not image.url:
        raise _bad_request("Email and image data are required")

    try:
        accounts.require_verified_user(body.email)
    except AccountError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)

    try:
        item = queue.register(body.email, image.url, image.name, image.size, notes=image.notes)
    except (RecordStoreError, RecordDecodeError) as exc:
        raise _upstream_failure("Failed to add image to queue", exc)

    return QueueItemResponse(queue_item=item)


@router.post("/status", response_model=QueueListResponse)
def queue_status(body: QueueStatusRequest, queue: QueueService = Depends(get_queue_service)):
    if not body.email:
        raise _bad_request("Email is required")
    try:
        items = queue.list_for_user(body.email)
    except (RecordStoreError, RecordDecodeError) as exc:
        raise _upstream_failure("Failed to get queue status", exc)
    return QueueListResponse(queue_items=items)


@router.post("/reorder", response_model=MessageResponse)
def reorder_queue(body: ReorderRequest, queue: QueueService = Depends(get_queue_service)):
    """
    Persist a drag-and-drop order: newOrder[i] gets priority i + 1.
    """
    new_order = body.new_order
    if (
        not body.user_email
        or not isinstance(new_order, list)
        or not all(isinstance(record_id, str) and record_id for record_id in new_order)
    ):
        raise _bad_request("User email and new order array are required")

    try:
        queue.reorder(body.user_email, new_order)
    except RecordStoreError as exc:
        raise _upstream_failure("Failed to reorder queue", exc)

    return MessageResponse(message="Queue reordered successfully")


@router.post("/delete", response_model=MessageResponse)
def delete_queue_item(body: DeleteRequest, queue: QueueService = Depends(get_queue_service)):
    if not body.record_id:
        raise _bad_request("Record ID is required")
    try:
        queue.delete(body.record_id)
    except RecordStoreError as exc:
        raise _upstream_failure("Failed to delete queue item", exc)
    return MessageResponse(message="Queue item deleted successfully")


@router.post("/update", response_model=MessageResponse)
def update_queue_item(body: QueueUpdateRequest, queue: QueueService = Depends(get_queue_service)):
    if not body.record_id:
        raise _bad_request("Record ID is required")
    try:
        queue.update(
            body.record_id,
            file_name=body.file_name,
            publish_date=body.publish_date,
            publish_time=body.publish_time,
        )
    except (RecordStoreError, RecordDecodeError) as exc:
        raise _upstream_failure("Failed to update queue item", exc)
    return MessageResponse(message="Queue item updated successfully")


@router.post("/bulk-add", response_model=BulkAddResponse, response_model_exclude_none=True)
def bulk_add(
    body: BulkAddRequest,
    accounts: AccountService = Depends(get_account_service),
    queue: QueueService = Depends(get_queue_service),
):
    """
    Queue several images at once. Each item succeeds or fails on its own;
    failures are reported per item instead of failing the request.
    """
    if not body.email or not body.queue_items:
        raise _bad_request("Email and non-empty queue items array are required")

    try:
        accounts.require_user(body.email)
    except AccountError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)

    experience_type = resolve_experience_type(body.workspace_code)
    results: List[BulkResult] = []
    errors: List[BulkResult] = []

    for index, entry in enumerate(body.queue_items):
        file_name = entry.file_name or BULK_DEFAULT_NAME
        try:
            item = queue.register(
                body.email,
                entry.image_url,
                file_name,
                entry.file_size or 0,
                notes=entry.notes or BULK_DEFAULT_NOTES,
                publish_date=entry.publish_date,
                publish_time=entry.publish_time,
                experience_type=experience_type,
            )
        except (RecordStoreError, RecordDecodeError) as exc:
            logger.warning(f"Bulk add item {index + 1}/{len(body.queue_items)} for {body.email} failed: {exc}")
            errors.append(BulkResult(original_id=str(index), file_name=file_name, status="error", error=str(exc)))
            continue
        results.append(BulkResult(original_id=str(index), file_name=file_name, status="success", queue_item_id=item.id))

    logger.info(f"Bulk add for {body.email}: {len(results)} queued, {len(errors)} failed")
    return BulkAddResponse(
        summary=BulkSummary(total=len(body.queue_items), successful=len(results), failed=len(errors)),
        results=results,
        errors=errors or None,
    )


@router.post("/tags", response_model=QueueItemResponse)
def add_tags(body: TagsRequest, queue: QueueService = Depends(get_queue_service)):
    tags = body.tags
    if not body.record_id or not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise _bad_request("Record ID and tags array are required")
    try:
        item = queue.add_tags(body.record_id, tags)
    except (RecordStoreError, RecordDecodeError) as exc:
        raise _upstream_failure("Failed to add tags", exc)
    return QueueItemResponse(queue_item=item)


@router.get("/tags", response_model=QueueListResponse)
def items_by_tag(email: str = "", tag: str = "", queue: QueueService = Depends(get_queue_service)):
    if not email or not tag:
        raise _bad_request("Email and tag are required")
    try:
        items = queue.items_by_tag(email, tag)
    except (RecordStoreError, RecordDecodeError) as exc:
        raise _upstream_failure("Failed to get queue items by tag", exc)
    return QueueListResponse(queue_items=items)


@router.post("/processing-time", response_model=QueueItemResponse)
def set_processing_time(body: ProcessingTimeRequest, queue: QueueService = Depends(get_queue_service)):
    seconds = body.processing_time_seconds
    if not body.record_id or isinstance(seconds, bool) or not isinstance(seconds, Number):
        raise _bad_request("Record ID and processing time (seconds) are required")
    try:
        item = queue.set_processing_time(body.record_id, seconds)
    except (RecordStoreError, RecordDecodeError) as exc:
        raise _upstream_failure("Failed to update processing time", exc)
    return QueueItemResponse(queue_item=item)
