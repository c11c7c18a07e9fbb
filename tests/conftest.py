"""Pytest configuration and shared fixtures for Daybook tests.

Provides a per-test SQLite database, a Flask app built with ``TestConfig``,
a test client, and helpers for registering users and building bearer headers.
"""

from __future__ import annotations

import tempfile
from itertools import count
from pathlib import Path

import pytest
from sqlmodel import create_engine

from daybook import create_app
from daybook.infra.database import create_session_factory, init_database
from daybook.services import auth as auth_service

_counter = count(1)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with all tables created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    init_database(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Transactional session factory, as used by the repositories."""

    return create_session_factory(db_engine)


@pytest.fixture
def user_factory(session_factory):
    """Factory creating persisted users with unique credentials."""

    def _create_user(**overrides):
        n = next(_counter)
        fields = {
            "name": f"Tester {n}",
            "username": f"tester{n}",
            "email": f"tester{n}@example.com",
            "password": "secret123",
        }
        fields.update(overrides)
        return auth_service.register_user(session_factory=session_factory, **fields)

    return _create_user


@pytest.fixture
def user(user_factory):
    return user_factory()


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture()
def app(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DAYBOOK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("DAYBOOK_DATABASE_URL", f"sqlite:///{tmp_path / 'daybook.db'}")
    monkeypatch.setenv("DAYBOOK_SECRET_KEY", "test-secret-key")
    # Error bodies carry a ``stack`` key in dev mode; tests opt in per case.
    monkeypatch.setenv("DAYBOOK_DEV_MODE", "false")
    monkeypatch.delenv("DAYBOOK_RATE_LIMIT_ENABLED", raising=False)
    monkeypatch.delenv("DAYBOOK_RATE_LIMIT", raising=False)
    app = create_app("testing")
    yield app
    app.extensions["daybook"]["engine"].dispose()


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client, **overrides) -> tuple[dict, str]:
    """Register through the API; returns (user payload, token)."""

    n = next(_counter)
    payload = {
        "name": f"User {n}",
        "username": f"user{n}",
        "email": f"user{n}@example.com",
        "password": "secret123",
    }
    payload.update(overrides)
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.get_json()
    data = response.get_json()["data"]
    return data["user"], data["token"]


@pytest.fixture()
def auth_headers(client) -> dict[str, str]:
    """Bearer headers for a freshly registered user."""

    _, token = register(client)
    return bearer(token)


@pytest.fixture()
def other_headers(client) -> dict[str, str]:
    """Bearer headers for a second, unrelated user."""

    _, token = register(client)
    return bearer(token)
