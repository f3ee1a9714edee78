# scripts/create_admin.py
import sys
import os
import requests
import argparse
from pathlib import Path

# Add parent directory to path so we can import image_queue modules
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from image_queue.core.config import settings
from image_queue.core.logging import logger
from image_queue.db.base import Base
from image_queue.db.init_db import ensure_admin
from image_queue.db.session import engine, session_scope


def create_admin(email: str, password: str):
    """Create the admin account, or reset its password when it exists"""
    Base.metadata.create_all(bind=engine)
    with session_scope() as db:
        admin = ensure_admin(db, email, password)
        logger.info(f"Admin account ready: {admin.email} (id {admin.id})")


def main():
    """Main entry point for the script"""
    parser = argparse.ArgumentParser(description='Create or update the Image Queue API admin account')
    parser.add_argument('--email', type=str, default=settings.ADMIN_EMAIL, help='Admin email (defaults to ADMIN_EMAIL)')
    parser.add_argument('--service-url', type=str, help='URL of the API service to health-check afterwards')

    args = parser.parse_args()

    # Password only from the environment so it never lands in shell history
    password = os.environ.get("ADMIN_PASSWORD") or settings.ADMIN_PASSWORD
    if not args.email or not password:
        logger.error("Admin email and ADMIN_PASSWORD are required")
        sys.exit(1)
    if len(password) < settings.MIN_PASSWORD_LENGTH:
        logger.error(f"Admin password must be at least {settings.MIN_PASSWORD_LENGTH} characters long")
        sys.exit(1)

    create_admin(args.email, password)

    if args.service_url:
        base_url = args.service_url.rstrip('/')
        try:
            response = requests.get(f"{base_url}/health")
            if response.status_code == 200:
                logger.info(f"API health check successful: {response.json()}")
            else:
                logger.error(f"API health check failed: {response.status_code}, {response.text}")
        except requests.RequestException as e:
            logger.error(f"Error accessing API: {str(e)}")


if __name__ == "__main__":
    main()
