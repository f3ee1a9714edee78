# image_queue/api/endpoints/upload.py
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from image_queue.api.deps import get_upload_pipeline
from image_queue.core.config import settings
from image_queue.core.logging import logger
from image_queue.schemas.upload import UploadResponse
from image_queue.services.cdn import CdnUploadError
from image_queue.services.media import TranscodeError, measure
from image_queue.services.upload import UploadPipeline

router = APIRouter()


def _bad_request(error: str, **details) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"error": error, **details})


@router.post("", response_model=UploadResponse)
async def upload_image(
    request: Request,
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    """
    Upload one image (multipart field `file`), convert it to WebP and
    store it on the CDN.

    Every input check happens before the CDN is contacted.
    """
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" not in content_type:
        raise _bad_request(
            "Invalid content type. Expected multipart/form-data",
            receivedContentType=content_type,
        )

    form = await request.form()
    file = form.get("file")
    if file is None:
        raise _bad_request("No file provided in request", availableFields=list(form.keys()))
    if not isinstance(file, UploadFile):
        raise _bad_request("Invalid file object provided", receivedType=type(file).__name__)

    file_type = file.content_type or ""
    if not file_type.startswith("image/"):
        raise _bad_request("File must be an image", receivedType=file_type, fileName=file.filename)

    size = file.size if file.size is not None else measure(file.file)
    if size > settings.MAX_UPLOAD_SIZE:
        logger.warning(f"Rejected {file.filename}: {size} bytes exceeds {settings.MAX_UPLOAD_SIZE}")
        raise _bad_request(
            "File size must be less than 10MB",
            receivedSize=size,
            maxSize=settings.MAX_UPLOAD_SIZE,
            recommendedSize=settings.RECOMMENDED_UPLOAD_SIZE,
            fileName=file.filename,
        )
    if size > settings.RECOMMENDED_UPLOAD_SIZE:
        logger.warning(
            f"Large upload {file.filename}: {size} bytes (recommended under {settings.RECOMMENDED_UPLOAD_SIZE})"
        )

    content = await file.read()
    try:
        result = await run_in_threadpool(pipeline.run, content, file.filename or "upload", file_type)
    except TranscodeError as exc:
        raise _bad_request(str(exc), fileName=file.filename)
    except CdnUploadError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "error": exc.user_message,
                "errorType": exc.kind.value,
                "attempts": exc.attempts,
                "retryable": True,
            },
        )

    logger.info(
        f"Uploaded {result.original_file_name} as {result.public_id} "
        f"({result.original_file_size} -> {result.processed_file_size} bytes)"
    )
    return result
