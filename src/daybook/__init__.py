"""Daybook application factory."""

from __future__ import annotations

from importlib import import_module
from typing import Iterable

from flask import Flask, jsonify

from . import cli as _cli
from .config import BaseConfig, DevConfig, ProductionConfig, TestConfig
from .timeutils import isoformat, utcnow

_CONFIG_MAP = {
    "development": DevConfig,
    "testing": TestConfig,
    "production": ProductionConfig,
    "default": BaseConfig,
}


def _resolve_config(name: str | None) -> type[BaseConfig]:
    """Return the config class for the provided environment name."""

    if not name:
        return BaseConfig
    return _CONFIG_MAP.get(name.lower(), BaseConfig)


def _blueprint_paths() -> Iterable[str]:
    """Yield blueprint import paths mounted under ``/api``."""

    yield "daybook.blueprints.auth"
    yield "daybook.blueprints.sessions"
    yield "daybook.blueprints.finance"
    yield "daybook.blueprints.tasks"
    yield "daybook.blueprints.goals"


def create_app(config_name: str | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__, instance_relative_config=True)
    config_obj = _resolve_config(config_name)()
    app.config.from_object(config_obj)
    app.config["SECRET_KEY"] = config_obj.SECRET_KEY
    app.config["DAYBOOK_CONFIG"] = config_obj
    app.json.sort_keys = False
    app.url_map.strict_slashes = False

    from .errors import register_error_handlers
    from .extensions import init_cors, init_db, init_limiter, init_security_headers
    from .logging_config import setup_logging

    logger = setup_logging(config_obj)
    init_db(app)
    register_error_handlers(app)
    init_cors(app)
    init_limiter(app)
    init_security_headers(app)
    _register_blueprints(app)
    _register_health(app)
    _cli.init_app(app)

    logger.info(
        "Application created",
        extra={"config": type(config_obj).__name__, "database_url": config_obj.DATABASE_URL},
    )
    return app


def _register_blueprints(app: Flask) -> None:
    """Import and register all blueprints declared in `_blueprint_paths`."""

    for dotted_path in _blueprint_paths():
        module = import_module(dotted_path)
        blueprint = getattr(module, "bp")
        app.register_blueprint(blueprint)


def _register_health(app: Flask) -> None:
    config: BaseConfig = app.config["DAYBOOK_CONFIG"]

    @app.get("/health")
    def health():
        return jsonify(
            status="OK",
            message=f"{config.APP_NAME} backend is running",
            timestamp=isoformat(utcnow()),
            version=config.VERSION,
        )


__all__ = ["create_app"]
