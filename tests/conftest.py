"""
Shared fixtures.

The application runs against in-memory SQLite and an in-process blob store,
so no PostgreSQL or S3 is needed.
"""

import os
import threading

# Set up test environment variables before importing application modules
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('S3_ENDPOINT', 'https://test.s3.com')
os.environ.setdefault('S3_ACCESS_KEY', 'test_access_key')
os.environ.setdefault('S3_SECRET_KEY', 'test_secret_key')
os.environ.setdefault('S3_BUCKET', 'test_bucket')
os.environ.setdefault('RATE_LIMIT_ENABLED', 'false')

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from core.database import Database
from core.exceptions import UploadError
from models.user import User


class FakeBlobStore:
    """
    Blob store double.

    Files whose name is listed in ``fail_names`` raise UploadError; every
    other upload returns a deterministic URL built from folder and filename.
    """

    def __init__(self, fail_names=()):
        self.fail_names = set(fail_names)
        self.uploads = []
        self._lock = threading.Lock()

    def upload(self, file_data, content_type, folder, filename=None):
        if filename in self.fail_names:
            raise UploadError(details=f"Simulated failure for {filename}")
        with self._lock:
            self.uploads.append((folder, filename, content_type))
        return f"https://blobs.test/{folder}/{filename}"


@pytest.fixture(scope="session")
def fake_blob_store_cls():
    return FakeBlobStore


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL="sqlite://",
        S3_ENDPOINT="https://test.s3.com",
        S3_ACCESS_KEY="test_access_key",
        S3_SECRET_KEY="test_secret_key",
        S3_BUCKET="test_bucket",
        API_KEYS="",
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_tables()
    yield db
    db.dispose()


@pytest.fixture
def session(database):
    db = database.session()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def app(settings, blob_store):
    from app.main import create_app
    return create_app(settings, blob_store=blob_store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def app_session(client, app):
    """Session on the same database the running app uses."""
    db = app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def add_users(db, users):
    """Insert (pin, username, designation) tuples and return the User rows."""
    rows = [User(pin=pin, username=username, designation=designation) for pin, username, designation in users]
    db.add_all(rows)
    db.commit()
    for row in rows:
        db.refresh(row)
    return rows


@pytest.fixture
def make_users():
    return add_users
