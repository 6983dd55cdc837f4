"""Pytest fixtures and configuration for taskboard tests."""

import pytest
from typing import Dict, List, Optional
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from unittest.mock import patch

from taskboard.database.database import Base
from taskboard.database import models  # noqa: F401
from taskboard.database.repository import TaskRepository
from taskboard.integrations.clerk import UserNotFound
from taskboard.models.user import DirectoryUser, Role


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

ADMIN_USER_ID = "user_admin0001"
MODERATOR_USER_ID = "user_moder0001"
ALICE_USER_ID = "user_alice0001"
TEST_SESSION_SECRET = "taskboard-test-session-secret-0001"


class FakeIdentityClient:
    """In-memory stand-in for the identity provider's directory.

    Records every call so tests can assert that lookups were (or were not)
    issued.
    """

    def __init__(self, users: List[DirectoryUser]):
        self.users: Dict[str, DirectoryUser] = {u.id: u for u in users}
        self.calls: List[tuple] = []

    def get_user(self, user_id: str) -> DirectoryUser:
        self.calls.append(("get_user", user_id))
        if user_id not in self.users:
            raise UserNotFound(f"User {user_id} not found", 404)
        return self.users[user_id]

    def search_users(self, query: str) -> List[DirectoryUser]:
        self.calls.append(("search_users", query))
        needle = query.lower()
        return [
            u for u in self.users.values()
            if any(needle in (field or "").lower() for field in (u.first_name, u.last_name, u.email))
        ]

    def set_user_role(self, user_id: str, role: str) -> None:
        self.calls.append(("set_user_role", user_id, role))
        self.users[user_id] = self.users[user_id].model_copy(update={"role": role})

    def clear_user_role(self, user_id: str) -> None:
        self.calls.append(("clear_user_role", user_id))
        self.users[user_id] = self.users[user_id].model_copy(update={"role": None})

    def role_of(self, user_id: str) -> Optional[str]:
        return self.users[user_id].role


@pytest.fixture(autouse=True)
def session_settings(monkeypatch):
    """Verify sessions with a known HS256 test secret and no JWKS endpoint."""
    from taskboard.auth import session

    monkeypatch.setattr(session, "SESSION_JWKS_URL", None)
    monkeypatch.setattr(session, "SESSION_SECRET_KEY", TEST_SESSION_SECRET)


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "user_test0001"


@pytest.fixture
def other_user_id():
    """A second owner, for isolation tests."""
    return "user_other0001"


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    # StaticPool keeps the single in-memory connection alive across sessions
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def identity_client(test_user_id):
    """Fake identity provider seeded with a small directory."""
    return FakeIdentityClient([
        DirectoryUser(id=ADMIN_USER_ID, first_name="Ada", last_name="Admin",
                      email="ada@example.com", role=Role.ADMIN),
        DirectoryUser(id=MODERATOR_USER_ID, first_name="Mo", last_name="Derator",
                      email="mo@example.com", role=Role.MODERATOR),
        DirectoryUser(id=ALICE_USER_ID, first_name="Alice", last_name="Anderson",
                      email="alice@example.com",
                      image_url="https://img.example.com/alice.png"),
        DirectoryUser(id=test_user_id, first_name="Test", last_name="User",
                      email="test@example.com"),
    ])


@pytest.fixture
def make_client(db_session: Session, identity_client):
    """Factory for FastAPI test clients.

    Overrides the database and identity provider dependencies. Pass a user ID
    to send a real signed session token for that user; pass None for an
    anonymous client.
    """
    from taskboard.api.app import app
    from taskboard.auth.dependencies import get_identity_client
    from taskboard.auth.session import create_session_token
    from taskboard.database.database import get_db

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_client] = lambda: identity_client

    clients = []

    def _make(user_id: Optional[str]) -> TestClient:
        headers = {"Authorization": f"Bearer {create_session_token(user_id)}"} if user_id else {}
        client = TestClient(app, headers=headers)
        client.__enter__()
        clients.append(client)
        return client

    # Schema comes from db_session; skip the startup create_all against the real URL.
    with patch("taskboard.api.app.init_db"):
        yield _make
        for client in clients:
            client.__exit__(None, None, None)

    # Clean up dependency overrides
    app.dependency_overrides.clear()


@pytest.fixture
def test_client(make_client, test_user_id):
    """Client authenticated as the regular test user (no role)."""
    return make_client(test_user_id)


@pytest.fixture
def anon_client(make_client):
    """Client without a session."""
    return make_client(None)


@pytest.fixture
def admin_client(make_client):
    """Client authenticated as an admin."""
    return make_client(ADMIN_USER_ID)


@pytest.fixture
def moderator_client(make_client):
    """Client authenticated as a moderator."""
    return make_client(MODERATOR_USER_ID)
