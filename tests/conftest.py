"""
Pytest configuration and shared fixtures.

Each test gets its own SQLite database file; the app's get_db dependency is
overridden to hand out the test session.
"""

import os

os.environ.setdefault("ENV", "test")

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401  (register tables on Base.metadata)
from app.core.notifier import FanoutNotifier
from app.core.presence import PresenceTracker
from app.db import Base, enable_sqlite_transactions, get_db
from app.main import create_app

from tests.fixtures.chat_fixtures import (  # noqa: F401  (fixtures)
    setup_direct_message,
    setup_direct_room,
    setup_message,
    setup_mood_room,
)


@pytest.fixture(scope="function")
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'moodlink_test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    enable_sqlite_transactions(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier():
    return FanoutNotifier(max_backlog=10)


@pytest.fixture
def presence(notifier):
    return PresenceTracker(notifier, timeout=30.0)


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def other_user_id():
    return uuid.uuid4()


@pytest.fixture
def auth_headers():
    """Headers the auth gateway would forward for a user."""

    def _headers(user) -> dict:
        return {"X-User-Id": str(user)}

    return _headers


@pytest.fixture
def client(db):
    """Client with db override."""
    app = create_app(testing=True)

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
