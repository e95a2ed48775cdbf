"""
Database connection and session management module.

This module provides the SQLAlchemy engine and session factory wrapped in a
``Database`` value that the application factory constructs once at startup and
disposes on shutdown, along with the FastAPI dependency that hands a session to
each request.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from core.config import Settings
from core.exceptions import StorageError

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()


class Database:
    """
    Engine plus session factory for the relational store.

    SQLite URLs (used by the test-suite) get a single shared connection so an
    in-memory database survives across sessions and threads.
    """

    def __init__(self, url: str, pool_size: int = 10, max_overflow: int = 20):
        if url.startswith("sqlite"):
            self.engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                url,
                pool_pre_ping=True,
                pool_size=pool_size,
                max_overflow=max_overflow
            )
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW
        )

    def create_tables(self) -> None:
        """Create every table registered on Base (no-op for existing tables)."""
        # Registers the models with Base.metadata
        from models import event, event_update, event_view, user  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency for a database session.

    This function is designed to be used as a FastAPI dependency to provide
    database sessions to route handlers. It ensures proper session cleanup
    after each request.

    Yields:
        Session: SQLAlchemy session bound to the application's Database

    Example:
        @router.get("/events")
        def list_events(db: Session = Depends(get_db)):
            return db.query(Event).all()
    """
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def storage_errors(db: Session, action: str) -> Iterator[None]:
    """
    Translate SQLAlchemy failures inside the block into StorageError.

    The session is rolled back so it can be reused by the caller.
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while trying to {action}: {e}")
        raise StorageError(details=f"Failed to {action}") from e
