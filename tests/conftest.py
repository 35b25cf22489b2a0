"""
Test configuration and fixtures for EatsAdvisor.

Implements the transaction rollback pattern:
- Session-scoped engine (in-memory SQLite unless TEST_DATABASE_URL is set)
- Function-scoped session joined to an outer transaction that is rolled back
- Service-level commits and rollbacks become SAVEPOINT operations
- TestClient with database dependency override
- Authenticated client fixture
"""

import os
import secrets
from typing import Generator
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import AppUser, Session as UserSession


# =============================================================================
# Database Fixtures
# =============================================================================


def get_test_database_url() -> str:
    """TEST_DATABASE_URL if set, otherwise an in-memory SQLite database."""
    return os.environ.get("TEST_DATABASE_URL", "sqlite://")


def _configure_sqlite(engine) -> None:
    """
    Let pysqlite run SAVEPOINTs inside an outer transaction.

    The driver's own transaction handling is disabled and SQLAlchemy emits
    BEGIN itself.
    """

    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def test_engine():
    """
    Create test database engine once per session.

    Tables are created at the start and dropped at the end.
    """
    database_url = get_test_database_url()

    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        _configure_sqlite(engine)
    else:
        engine = create_engine(database_url)

    Base.metadata.create_all(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(test_engine) -> Generator[Session, None, None]:
    """
    Provide a transactional database session that rolls back after each test.

    Services commit and roll back freely; with create_savepoint those calls
    only release or roll back a SAVEPOINT inside the outer transaction.
    """
    connection = test_engine.connect()
    transaction = connection.begin()

    session = Session(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    # Cleanup: rollback and close
    session.close()
    transaction.rollback()
    connection.close()


# =============================================================================
# TestClient Fixtures
# =============================================================================


@pytest.fixture
def client(db: Session) -> Generator[TestClient, None, None]:
    """
    TestClient with database dependency override.

    The database session is injected into the app's get_db dependency.
    """

    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close - managed by db fixture

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Authentication Fixtures
# =============================================================================


@pytest.fixture
def test_user(db: Session) -> AppUser:
    """Create a test user."""
    user = AppUser(email="testuser@example.com", name="Test User")
    db.add(user)
    db.flush()
    return user


@pytest.fixture
def test_session(db: Session, test_user: AppUser) -> UserSession:
    """Create a test session for the test user."""
    session = UserSession(
        user_id=test_user.id,
        token=secrets.token_urlsafe(32),
        expires_at=datetime.now(timezone.utc) + timedelta(days=7),
        user_agent="pytest-test-client",
    )
    db.add(session)
    db.flush()
    return session


@pytest.fixture
def auth_client(
    db: Session, test_session: UserSession
) -> Generator[TestClient, None, None]:
    """
    Authenticated TestClient for the test user.

    Sends the session token as a bearer token.
    """

    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close - managed by db fixture

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        test_client.headers["Authorization"] = f"Bearer {test_session.token}"
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_ai_service(monkeypatch):
    """
    Mock AI service for testing recommendation flows.

    Replaces the orchestrator's AI client; configure responses per test.
    """
    from app.services.recommendation_service import recommendation_service
    from tests.fixtures.mocks import MockAIService

    mock_service = MockAIService()
    monkeypatch.setattr(recommendation_service, "ai_service", mock_service)

    return mock_service


# =============================================================================
# pytest markers
# =============================================================================


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
