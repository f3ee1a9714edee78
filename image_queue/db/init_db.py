import logging
from datetime import datetime
from sqlalchemy.orm import Session

from image_queue.models.user import User
from image_queue.core.config import settings
from image_queue.core.security import hash_password

logger = logging.getLogger(__name__)


def ensure_admin(db: Session, email: str, password: str) -> User:
    """Create the admin account, or reset its password if it already exists."""
    hashed_password = hash_password(password)
    admin = db.query(User).filter(User.email == email).first()

    if admin:
        logger.info("Admin already exists, updating password")
        admin.preferences = {
            **(admin.preferences or {}),
            "hashedPassword": hashed_password,
            "isAdmin": True,
            "workspaceCode": "admin",
        }
        admin.is_verified = True
    else:
        logger.info("Creating admin account")
        admin = User(
            email=email,
            is_verified=True,
            preferences={
                "hashedPassword": hashed_password,
                "isAdmin": True,
                "workspaceCode": "admin",
                "accountSetupComplete": True,
                "setupDate": datetime.utcnow().isoformat(),
            },
        )
        db.add(admin)

    db.commit()
    db.refresh(admin)
    return admin


def init_db(db: Session) -> None:
    """Initialize the database with seed data"""
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        logger.info("ADMIN_EMAIL/ADMIN_PASSWORD not set, skipping admin seed")
        return

    existing_admin = db.query(User).filter(User.email == settings.ADMIN_EMAIL).first()
    if existing_admin:
        logger.info("Database already contains the admin account, skipping initialization")
        return

    admin = ensure_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    logger.info(f"Created admin user: {admin.email}")
