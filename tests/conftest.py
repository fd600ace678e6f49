"""Shared fixtures: in-memory database, API client and signed-in users.

Every test gets a fresh in-memory SQLite database on a StaticPool so the
request sessions and the test's own session see the same connection.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from todo_api.database import get_db
from todo_api.main import app
from todo_api.rate_limiter import RATE_LIMITS, RateLimiter, get_rate_limiter


class FrozenClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(RATE_LIMITS, clock=clock)


@pytest.fixture
def client(session_factory, limiter):
    """API client with the database and rate limiter overridden."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_limiter] = lambda: limiter

    # No context manager: the lifespan would create tables on the real engine
    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()


def _sign_up(client, email: str) -> dict:
    res = client.post("/api/auth/signup", json={"email": email, "password": "password"})
    assert res.status_code == 201, res.text
    body = res.json()
    # The client keeps the signup cookie; drop it so only explicit headers count
    client.cookies.clear()
    return {
        "id": body["user"]["id"],
        "headers": {"Authorization": f"Bearer {body['access_token']}"},
    }


@pytest.fixture
def alice(client):
    return _sign_up(client, "alice@example.com")


@pytest.fixture
def bob(client):
    return _sign_up(client, "bob@example.com")
