"""
Pytest configuration and fixtures for Inkpost API tests.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.dependencies import view_tracker
from app.limiter import limiter
from app.main import app
from app.models.user import User
from app.auth import get_password_hash, create_access_token

# Disable rate limiting for tests
limiter.enabled = False

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Global session for sharing across requests
_test_session = None

CONTENT = (
    "FastAPI makes it easy to build typed HTTP APIs in Python. "
    "This post walks through routers, dependencies and testing."
)


def get_test_db():
    """Get the shared test database session."""
    global _test_session
    try:
        yield _test_session
    finally:
        pass


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    # Create all tables
    Base.metadata.create_all(bind=engine)

    # Create a session
    _test_session = TestingSessionLocal()

    # Override the get_db dependency
    app.dependency_overrides[get_db] = get_test_db
    view_tracker.clear()

    yield _test_session

    # Cleanup
    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None

    # Drop all tables
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


def _make_user(db, email, display_name, role="user"):
    user = User(
        email=email,
        hashed_password=get_password_hash("testpassword123"),
        display_name=display_name,
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _headers_for(user):
    token = create_access_token({"sub": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def test_user(db):
    """Create a test user."""
    return _make_user(db, "test@example.com", "Test User")


@pytest.fixture(scope="function")
def other_user(db):
    """A second author."""
    return _make_user(db, "other@example.com", "Other User")


@pytest.fixture(scope="function")
def admin_user(db):
    """Create an admin."""
    return _make_user(db, "admin@example.com", "Admin", role="admin")


@pytest.fixture(scope="function")
def auth_token(test_user):
    """Get an auth token for the test user."""
    return create_access_token({"sub": str(test_user.id), "role": test_user.role})


@pytest.fixture(scope="function")
def auth_headers(auth_token):
    """Get auth headers for the test user."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture(scope="function")
def other_headers(other_user):
    return _headers_for(other_user)


@pytest.fixture(scope="function")
def admin_headers(admin_user):
    """Get auth headers for the admin."""
    return _headers_for(admin_user)


@pytest.fixture(scope="function")
def create_blog(client):
    """Create a blog through the API and return its JSON."""
    def _create(headers, title="Hello World!!", status="draft", **extra):
        payload = {"title": title, "content": CONTENT, "status": status}
        payload.update(extra)
        response = client.post("/api/blogs", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["blog"]

    return _create


@pytest.fixture(scope="function")
def published_blog(client, create_blog, auth_headers, admin_headers):
    """A blog by the test user, submitted and approved by the admin."""
    blog = create_blog(auth_headers, status="pending")
    response = client.put(
        f"/api/admin/blogs/{blog['id']}/review",
        json={"status": "approved"},
        headers=admin_headers,
    )
    assert response.status_code == 200, response.text
    return response.json()["data"]["blog"]
