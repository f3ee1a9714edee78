"""Shared fixtures: temporary SQLite database, in-memory record store, test client."""
import os
import tempfile

# Must be set before image_queue is imported: settings are read once at import
_db_dir = tempfile.mkdtemp(prefix="image_queue_tests_")
os.environ["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["REQUIRE_INTEGRATIONS"] = "false"
os.environ["ADMIN_EMAIL"] = "admin@example.com"
os.environ["PUBLIC_BASE_URL"] = "https://app.example.com"
for _name in (
    "ADMIN_PASSWORD",
    "AIRTABLE_API_KEY",
    "AIRTABLE_BASE_ID",
    "CLOUDINARY_CLOUD_NAME",
    "CLOUDINARY_API_KEY",
    "CLOUDINARY_API_SECRET",
    "BREVO_API_KEY",
    "BREVO_SENDER_EMAIL",
):
    os.environ.pop(_name, None)

import pytest
from fastapi.testclient import TestClient

from image_queue.api import deps
from image_queue.core.security import hash_password
from image_queue.db.base import Base
from image_queue.db.session import SessionLocal, engine
from image_queue.main import app
from image_queue.models.user import User
from tests.fakes import InMemoryRecordStore, RecordingEmailService, image_bytes


@pytest.fixture(autouse=True)
def fresh_database():
    """Recreate every table for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def email_service() -> RecordingEmailService:
    return RecordingEmailService(enabled=False)


@pytest.fixture
def client(record_store, email_service) -> TestClient:
    """Test client wired to the in-memory record store and recording email service."""
    app.dependency_overrides[deps.get_record_store] = lambda: record_store
    app.dependency_overrides[deps.get_email_service] = lambda: email_service
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make_user(email: str, verified: bool = True, password: str = None, workspace_code: str = None) -> User:
        preferences = {}
        if password:
            preferences["hashedPassword"] = hash_password(password)
        if workspace_code:
            preferences["workspaceCode"] = workspace_code
        user = User(email=email, is_verified=verified, preferences=preferences)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def png_bytes() -> bytes:
    return image_bytes("PNG")


@pytest.fixture
def jpeg_bytes() -> bytes:
    return image_bytes("JPEG")
