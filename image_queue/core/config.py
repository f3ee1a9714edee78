# image_queue/core/config.py
from pydantic_settings import BaseSettings
from typing import Optional, Dict, Any, List
from ast import literal_eval


class Settings(BaseSettings):
    PROJECT_NAME: str = "Image Queue API"
    API_PREFIX: str = "/api"
    PUBLIC_BASE_URL: str = "http://localhost:3000"

    # Fail at startup instead of per request when an integration is unset
    REQUIRE_INTEGRATIONS: bool = False

    # Database settings
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    # Remote record store (Airtable REST API)
    AIRTABLE_API_KEY: Optional[str] = None
    AIRTABLE_BASE_ID: Optional[str] = None
    AIRTABLE_API_URL: str = "https://api.airtable.com/v0"
    AIRTABLE_USERS_TABLE: str = "Users"
    AIRTABLE_QUEUE_TABLE: str = "Image Queue"
    AIRTABLE_NOTIFICATIONS_TABLE: str = "Notifications"
    AIRTABLE_TIMEOUT: Optional[float] = None

    # Media CDN (Cloudinary unsigned upload)
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_UPLOAD_PRESET: str = "ml_default"
    CLOUDINARY_UPLOAD_URL: str = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"
    CDN_UPLOAD_TIMEOUT: float = 120.0
    CDN_UPLOAD_ATTEMPTS: int = 3
    CDN_RETRY_BASE_DELAY: float = 2.0

    # Transactional email (Brevo)
    BREVO_API_KEY: Optional[str] = None
    BREVO_SENDER_EMAIL: Optional[str] = None
    BREVO_SENDER_NAME: str = "Workspace Team"
    BREVO_API_URL: str = "https://api.brevo.com/v3/smtp/email"

    # Admin
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    # Workspace code -> experience type record id
    EXPERIENCE_TYPES: Dict[str, str] = {
        "homegrownnationalpark": "recquHAhmVdggGNOp",
        "hnp": "recquHAhmVdggGNOp",
    }

    # Link tokens
    RESET_TOKEN_TTL_SECONDS: int = 60 * 60
    INVITE_TOKEN_TTL_SECONDS: int = 30 * 24 * 60 * 60
    MIN_PASSWORD_LENGTH: int = 6

    # Development server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    RELOAD: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []

    # File upload settings
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB
    RECOMMENDED_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB
    WEBP_QUALITY: int = 90
    WEBP_METHOD: int = 6
    MAX_IMAGE_PIXELS: int = 50_000_000

    class Config:
        env_file = ".env"
        case_sensitive = True

    def __init__(self, **data: Any):
        super().__init__(**data)

        # Process CORS origins from string representation if needed
        if isinstance(self.BACKEND_CORS_ORIGINS, str):
            try:
                self.BACKEND_CORS_ORIGINS = literal_eval(self.BACKEND_CORS_ORIGINS)
            except (ValueError, SyntaxError):
                self.BACKEND_CORS_ORIGINS = []

        # Construct DB URI if not provided directly
        if not self.SQLALCHEMY_DATABASE_URI:
            if self.POSTGRES_SERVER and self.POSTGRES_USER and self.POSTGRES_PASSWORD and self.POSTGRES_DB:
                self.SQLALCHEMY_DATABASE_URI = (
                    f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
                    f"@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"
                )
            else:
                # Default to SQLite if PostgreSQL settings are not complete
                self.SQLALCHEMY_DATABASE_URI = "sqlite:///./image_queue.db"

    @property
    def airtable_configured(self) -> bool:
        return bool(self.AIRTABLE_API_KEY and self.AIRTABLE_BASE_ID)

    @property
    def cloudinary_configured(self) -> bool:
        return bool(self.CLOUDINARY_CLOUD_NAME and self.CLOUDINARY_API_KEY and self.CLOUDINARY_API_SECRET)

    @property
    def email_configured(self) -> bool:
        return bool(self.BREVO_API_KEY and self.BREVO_SENDER_EMAIL)

    def missing_integrations(self) -> List[str]:
        """Names of the integration groups that have no credentials."""
        missing = []
        if not self.airtable_configured:
            missing.append("airtable")
        if not self.cloudinary_configured:
            missing.append("cloudinary")
        if not self.email_configured:
            missing.append("brevo")
        return missing


settings = Settings()
