"""Tests for the application factory and cross-cutting middleware."""

from __future__ import annotations

import pytest

from daybook import create_app
from daybook.config import DevConfig, ProductionConfig, TestConfig
from daybook.extensions import SECURITY_HEADERS


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "OK"
    assert body["message"] == "Daybook backend is running"
    assert body["version"] == "1.0.0"
    assert body["timestamp"].endswith("Z")


def test_security_headers_on_every_response(client):
    for path in ("/health", "/nope"):
        response = client.get(path)
        for header, value in SECURITY_HEADERS.items():
            assert response.headers[header] == value


def test_cors_allows_browser_origin(client):
    origin = "http://localhost:3000"

    response = client.get("/health", headers={"Origin": origin})

    assert response.headers["Access-Control-Allow-Origin"] in {"*", origin}


def test_cors_preflight_skips_authentication(client):
    response = client.options(
        "/api/sessions/active",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Authorization",
        },
    )

    assert response.status_code == 200
    assert "Access-Control-Allow-Origin" in response.headers


def test_trailing_slash_is_optional(client, auth_headers):
    assert client.get("/api/goals", headers=auth_headers).status_code == 200
    assert client.get("/api/goals/", headers=auth_headers).status_code == 200


def test_rate_limit_returns_json_429(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DAYBOOK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("DAYBOOK_DATABASE_URL", f"sqlite:///{tmp_path / 'limited.db'}")
    monkeypatch.setenv("DAYBOOK_RATE_LIMIT_ENABLED", "true")
    monkeypatch.setenv("DAYBOOK_RATE_LIMIT", "3 per minute")
    app = create_app("testing")
    client = app.test_client()

    statuses = [client.get("/health").status_code for _ in range(4)]

    assert statuses == [200, 200, 200, 429]
    limited = client.get("/health")
    assert limited.get_json() == {
        "success": False,
        "error": "Too many requests from this IP, please try again later.",
    }
    app.extensions["daybook"]["engine"].dispose()


def test_production_requires_secret_key(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DAYBOOK_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("DAYBOOK_SECRET_KEY", raising=False)
    monkeypatch.delenv("DAYBOOK_DEV_MODE", raising=False)

    with pytest.raises(ValueError, match="DAYBOOK_SECRET_KEY"):
        ProductionConfig()

    monkeypatch.setenv("DAYBOOK_SECRET_KEY", "prod-secret")
    config = ProductionConfig()
    assert config.DEV_MODE is False
    assert "http://localhost:3000" in config.cors_origins()


def test_config_defaults(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DAYBOOK_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("DAYBOOK_DATABASE_URL", raising=False)
    monkeypatch.delenv("DAYBOOK_RATE_LIMIT_ENABLED", raising=False)
    monkeypatch.delenv("DAYBOOK_TOKEN_MAX_AGE", raising=False)

    dev = DevConfig()
    test = TestConfig()

    assert dev.DATABASE_URL == f"sqlite:///{tmp_path.resolve() / 'daybook.db'}"
    assert dev.TOKEN_MAX_AGE == 30 * 24 * 60 * 60
    assert dev.RATE_LIMIT_ENABLED is True
    assert test.RATE_LIMIT_ENABLED is False
    assert dev.sqlalchemy_engine_options() == {"connect_args": {"check_same_thread": False}}
