"""
Pytest configuration and shared fixtures for the test suite.
Ensures proper Python path and provides common fixtures for unit and integration tests.
"""
import os
import sys
import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Must be set before api.config is imported anywhere: settings and the engine are built at import time.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="tvenglish-test-logs-")
os.environ.setdefault("JWT_SECRET", "test-secret")

# Add project root and src to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
src_path = project_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


class FakeClock:
    """Settable clock; call it for today's date (client) or .now for a datetime (server)."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today

    def now(self) -> datetime:
        return datetime(self.today.year, self.today.month, self.today.day, 12, 0, 0)


@pytest.fixture
def clock():
    return FakeClock(date(2024, 1, 10))


# ----- In-memory DB (for tests that need DB without touching real DB) -----
@pytest.fixture
def in_memory_engine():
    """Create an in-memory SQLite engine for tests (one shared connection)."""
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


@pytest.fixture
def db_session(in_memory_engine):
    """Create an in-memory database session. Uses api.config.Base for schema."""
    import api.models  # noqa: F401
    from api.config import Base
    Base.metadata.create_all(in_memory_engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=in_memory_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def test_user(db_session):
    """Create a test user in the DB."""
    from api.models.models import User
    from api.utils.jwt import get_password_hash
    user = User(
        username="learner",
        email="learner@example.com",
        hashed_password=get_password_hash("testpass123"),
        full_name="Test Learner",
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user
