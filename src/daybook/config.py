"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Daybook"
    VERSION = "1.0.0"
    DB_FILENAME = "daybook.db"
    TESTING = False
    DEFAULT_DEV_MODE = True
    DEFAULT_TOKEN_MAX_AGE = 30 * 24 * 60 * 60
    CORS_DEV_ORIGINS = (
        "http://localhost:3000",
        "http://localhost:8081",
        "http://127.0.0.1:8081",
        "http://localhost:19006",
        "http://localhost:19000",
    )

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("DAYBOOK_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("DAYBOOK_DEV_MODE", default=self.DEFAULT_DEV_MODE)
        self.DATABASE_URL = os.getenv("DAYBOOK_DATABASE_URL", self._build_sqlite_url())
        self.TOKEN_MAX_AGE = _env_int("DAYBOOK_TOKEN_MAX_AGE", self.DEFAULT_TOKEN_MAX_AGE)
        self.RATE_LIMIT = os.getenv("DAYBOOK_RATE_LIMIT", "100 per 15 minutes")
        self.RATE_LIMIT_ENABLED = _env_bool("DAYBOOK_RATE_LIMIT_ENABLED", default=True)
        self.FRONTEND_URL = os.getenv("DAYBOOK_FRONTEND_URL")
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("DAYBOOK_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("DAYBOOK_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def cors_origins(self) -> list[str] | str:
        """Origins allowed to call the API from a browser."""

        if self.DEV_MODE:
            return "*"
        origins = list(self.CORS_DEV_ORIGINS)
        if self.FRONTEND_URL:
            origins.append(self.FRONTEND_URL)
        return origins

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {"pool_size": 10, "pool_pre_ping": True, "pool_recycle": 1800}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True


class TestConfig(BaseConfig):
    """Configuration used by the test-suite; rate limiting is off unless enabled."""

    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.RATE_LIMIT_ENABLED = _env_bool("DAYBOOK_RATE_LIMIT_ENABLED", default=False)


class ProductionConfig(BaseConfig):
    """Production configuration; requires an explicit secret key."""

    DEBUG = False
    DEFAULT_DEV_MODE = False
