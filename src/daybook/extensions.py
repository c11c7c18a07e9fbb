"""Database and extension wiring for Daybook."""

from __future__ import annotations

from flask import Flask, current_app
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from .config import BaseConfig
from .infra.database import SessionFactory, create_db_engine, create_session_factory, init_database

_EXTENSION_KEY = "daybook"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "X-DNS-Prefetch-Control": "off",
}


def init_db(app: Flask) -> None:
    """Initialize the SQLModel engine using configuration from the app."""

    config: BaseConfig = app.config["DAYBOOK_CONFIG"]
    engine = create_db_engine(config)
    init_database(engine)
    # TODO(@db): replace create_all with Alembic migrations once the schema needs to evolve.
    app.extensions[_EXTENSION_KEY] = {
        "engine": engine,
        "session_factory": create_session_factory(engine),
    }


def get_engine():
    """Return the engine bound to the current app."""
    return current_app.extensions[_EXTENSION_KEY]["engine"]


def get_session_factory() -> SessionFactory:
    """Return the session factory bound to the current app."""
    return current_app.extensions[_EXTENSION_KEY]["session_factory"]


def init_cors(app: Flask) -> None:
    config: BaseConfig = app.config["DAYBOOK_CONFIG"]
    CORS(
        app,
        origins=config.cors_origins(),
        supports_credentials=True,
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )


def init_limiter(app: Flask) -> Limiter:
    """Apply the per-IP request window to every route."""

    config: BaseConfig = app.config["DAYBOOK_CONFIG"]
    app.config["RATELIMIT_ENABLED"] = config.RATE_LIMIT_ENABLED
    app.config.setdefault("RATELIMIT_HEADERS_ENABLED", True)
    limiter = Limiter(
        key_func=get_remote_address,
        app=app,
        default_limits=[config.RATE_LIMIT],
        storage_uri="memory://",
    )
    app.extensions[_EXTENSION_KEY]["limiter"] = limiter
    return limiter


def init_security_headers(app: Flask) -> None:
    @app.after_request
    def _apply_security_headers(response):
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


__all__ = [
    "get_engine",
    "get_session_factory",
    "init_cors",
    "init_db",
    "init_limiter",
    "init_security_headers",
]
