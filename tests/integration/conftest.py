"""
Integration test fixtures. Overrides get_db for API tests with in-memory DB.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


@pytest.fixture
def override_get_db():
    """Create in-memory engine and session factory for API tests."""
    import api.models  # noqa: F401
    from api.config import Base
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    return _get_db


@pytest.fixture
def api_client(override_get_db):
    """FastAPI TestClient with in-memory DB override."""
    from fastapi.testclient import TestClient
    from api.api import app
    from api.config import get_db
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def register_and_login(client, username="learner", email="learner@example.com", password="testpass123"):
    """Register a user through the API and return (user_id, token)."""
    response = client.post(
        "/api/users/register",
        json={"username": username, "email": email, "password": password},
    )
    assert response.status_code == 201, response.text
    response = client.post("/api/users/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    return data["user"]["id"], data["token"]


@pytest.fixture
def register_user(api_client):
    """Helper to register and log in additional users: register_user(username, email) -> (user_id, token)."""
    return lambda username, email: register_and_login(api_client, username=username, email=email)


@pytest.fixture
def auth_user(api_client):
    """(user_id, headers) for a freshly registered user."""
    user_id, token = register_and_login(api_client)
    return user_id, {"Authorization": f"Bearer {token}"}
