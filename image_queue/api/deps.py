# image_queue/api/deps.py
"""
Dependency providers for route handlers.

Each component is built from `settings` here and nowhere else; tests swap
them out through `app.dependency_overrides`.
"""
from functools import lru_cache

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from image_queue.core.config import settings
from image_queue.core.logging import logger
from image_queue.db.session import get_db
from image_queue.services.accounts import AccountService
from image_queue.services.bank import BankRepository, BankService, SqlBankRepository
from image_queue.services.cdn import CdnClient
from image_queue.services.directory import UserDirectory
from image_queue.services.email import EmailService
from image_queue.services.media import MediaService
from image_queue.services.notifications import NotificationService
from image_queue.services.queue import QueueService
from image_queue.services.record_store import RecordStoreClient
from image_queue.services.upload import UploadPipeline


def _configuration_missing(integration: str) -> HTTPException:
    logger.error(f"{integration} configuration missing")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"{integration} configuration missing",
    )


@lru_cache()
def _record_store() -> RecordStoreClient:
    return RecordStoreClient(
        api_key=settings.AIRTABLE_API_KEY,
        base_id=settings.AIRTABLE_BASE_ID,
        api_url=settings.AIRTABLE_API_URL,
        timeout=settings.AIRTABLE_TIMEOUT,
    )


@lru_cache()
def _cdn_client() -> CdnClient:
    return CdnClient(
        cloud_name=settings.CLOUDINARY_CLOUD_NAME,
        upload_preset=settings.CLOUDINARY_UPLOAD_PRESET,
        upload_url=settings.CLOUDINARY_UPLOAD_URL,
        timeout=settings.CDN_UPLOAD_TIMEOUT,
        max_attempts=settings.CDN_UPLOAD_ATTEMPTS,
        base_delay=settings.CDN_RETRY_BASE_DELAY,
    )


@lru_cache()
def _email_service() -> EmailService:
    return EmailService(
        api_key=settings.BREVO_API_KEY,
        sender_email=settings.BREVO_SENDER_EMAIL,
        sender_name=settings.BREVO_SENDER_NAME,
        api_url=settings.BREVO_API_URL,
    )


def get_record_store() -> RecordStoreClient:
    if not settings.airtable_configured:
        raise _configuration_missing("Airtable")
    return _record_store()


def get_queue_service(store: RecordStoreClient = Depends(get_record_store)) -> QueueService:
    return QueueService(store, table=settings.AIRTABLE_QUEUE_TABLE)


def get_notification_service(store: RecordStoreClient = Depends(get_record_store)) -> NotificationService:
    return NotificationService(store, table=settings.AIRTABLE_NOTIFICATIONS_TABLE)


def get_user_directory(store: RecordStoreClient = Depends(get_record_store)) -> UserDirectory:
    return UserDirectory(store, table=settings.AIRTABLE_USERS_TABLE)


def get_email_service() -> EmailService:
    """Always available; `EmailService.enabled` is False without credentials."""
    return _email_service()


def get_account_service(
    db: Session = Depends(get_db),
    email: EmailService = Depends(get_email_service),
) -> AccountService:
    return AccountService(
        db,
        email=email,
        public_base_url=settings.PUBLIC_BASE_URL,
        min_password_length=settings.MIN_PASSWORD_LENGTH,
    )


def get_bank_repository(db: Session = Depends(get_db)) -> BankRepository:
    return SqlBankRepository(db)


def get_bank_service(repository: BankRepository = Depends(get_bank_repository)) -> BankService:
    return BankService(repository)


def get_promotion_service(
    repository: BankRepository = Depends(get_bank_repository),
    queue: QueueService = Depends(get_queue_service),
) -> BankService:
    return BankService(repository, queue)


def get_cdn_client() -> CdnClient:
    if not settings.cloudinary_configured:
        raise _configuration_missing("Cloudinary")
    return _cdn_client()


def get_media_service() -> MediaService:
    return MediaService(quality=settings.WEBP_QUALITY, method=settings.WEBP_METHOD)


def get_upload_pipeline(
    media: MediaService = Depends(get_media_service),
    cdn: CdnClient = Depends(get_cdn_client),
) -> UploadPipeline:
    return UploadPipeline(media, cdn)
