# backend/tests/conftest.py
"""
Pytest configuration for the mentorship scheduling backend.

Every test gets its own SQLite database file, a frozen clock and a
recording notifier. Nothing here talks to the developer database: the
settings are pointed at a throwaway URL before any application import.
"""

import os

# Set testing mode BEFORE any app imports
os.environ["IS_TESTING"] = "true"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("CI", "true")

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from mentorship.api.dependencies import get_clock, get_db, get_notifier
from mentorship.database import Base
from mentorship.main import app
from tests._helpers import FrozenClock, RecordingDispatcher


@pytest.fixture
def engine(tmp_path):
    """Fresh SQLite database file per test."""
    test_engine = create_engine(
        f"sqlite:///{tmp_path / 'mentorship_test.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    from mentorship import models  # noqa: F401

    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def notifier() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def client(session_factory, clock, notifier) -> TestClient:
    """API client wired to the per-test database, clock and notifier."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
