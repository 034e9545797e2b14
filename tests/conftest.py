"""Pytest fixtures and configuration for Quiet Hours tests."""

import os

# Keep app startup (init_db) away from the on-disk development database.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from quiethours.database.database import Base
from quiethours.database.models import UserDB
from quiethours.database.study_block_repository import StudyBlockRepository
from quiethours.database.user_repository import UserRepository
from quiethours.models.study_block import StudyBlock, new_block_id


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# Fixed sweep time used by engine tests
SWEEP_NOW = datetime(2024, 1, 1, 10, 0, 0)


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


@pytest.fixture(scope="function")
def db_session(test_user_id):
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    Also creates a test user (required for the study_blocks foreign key).
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    now = datetime(2023, 12, 1, 9, 0, 0)
    session.add(UserDB(id=test_user_id, email="test@example.com", name="Test User", created_at=now, updated_at=now))
    session.add(UserDB(id="other-user-456", email="other@example.com", name="Other User", created_at=now, updated_at=now))
    session.commit()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def block_repository(db_session: Session):
    """Create a StudyBlockRepository instance for testing."""
    return StudyBlockRepository(db_session)


@pytest.fixture
def user_repository(db_session: Session):
    return UserRepository(db_session)


@pytest.fixture
def make_block(block_repository, test_user_id):
    """Factory that stores a block starting `offset` after SWEEP_NOW.

    Usage: make_block(timedelta(minutes=5), duration_min=45, user_id=None)
    """
    def _make(offset: timedelta, duration_min: int = 45, user_id: str = None, base: datetime = SWEEP_NOW) -> StudyBlock:
        start = base + offset
        block = StudyBlock(
            block_id=new_block_id(),
            user_id=user_id or test_user_id,
            start_time=start,
            end_time=start + timedelta(minutes=duration_min),
            reminder_sent=False,
            created_at=base - timedelta(days=1),
        )
        return block_repository.create(block)
    return _make


@pytest.fixture
def fake_notifier():
    """Notifier double: every user resolves to an address and every delivery succeeds."""
    notifier = MagicMock()
    notifier.resolve_contact.side_effect = lambda user_id: f"{user_id}@example.com"
    notifier.deliver.return_value = True
    return notifier


@pytest.fixture
def test_user(test_user_id):
    """Create a test user object."""
    from quiethours.models.user import User
    now = datetime(2023, 12, 1, 9, 0, 0)
    return User(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def test_client(db_session: Session, test_user, fake_notifier, monkeypatch):
    """Create a FastAPI test client with overridden database, authentication and notifier."""
    from quiethours.api.app import app, get_notifier
    from quiethours.database.database import get_db
    from quiethours.auth.dependencies import get_current_user

    monkeypatch.delenv("CRON_SECRET", raising=False)
    monkeypatch.delenv("REMINDER_SCHEDULER_AUTOSTART", raising=False)

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    def override_get_current_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.dependency_overrides[get_notifier] = lambda: fake_notifier

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
