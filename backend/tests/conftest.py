"""
Central pytest configuration for the booking backend tests.

Provides the database session, Flask app/client and auth header fixtures
shared by unit and integration tests.
"""

import os

# Test database configuration (set early so the lazy engine uses it)
TEST_DATABASE_URL = "sqlite:///:memory:"  # In-memory SQLite for fast tests
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["TESTING"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "0"  # Disable rate limiting in tests
os.environ["LOG_TO_FILE"] = "0"
os.environ.setdefault("TZ", "UTC")

import pytest

from booking.core.security import create_user_token
from booking.db.session import SessionLocal, create_tables, drop_tables
from tests.config.markers import (  # noqa: F401
    pytest_collection_modifyitems,
    pytest_configure,
)


@pytest.fixture
def db_session():
    """Fresh schema per test; dropped again on teardown."""
    create_tables()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        drop_tables()


@pytest.fixture
def app(db_session):
    from booking.main import create_app

    flask_app = create_app({"TESTING": True})
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    """Factory returning bearer headers for a user id."""

    def _headers(user_id: int) -> dict:
        return {"Authorization": f"Bearer {create_user_token(user_id)}"}

    return _headers
