# image_queue/db/session.py
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from image_queue.core.config import settings


def _connect_args(database_uri: str) -> dict:
    # Route handlers run in a threadpool; SQLite connections must be shareable
    return {"check_same_thread": False} if database_uri.startswith("sqlite") else {}


engine = create_engine(
    settings.SQLALCHEMY_DATABASE_URI,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.SQLALCHEMY_DATABASE_URI),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Iterator[Session]:
    """Request-scoped session for route dependencies."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for startup code and scripts."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
