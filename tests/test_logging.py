"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys
from types import SimpleNamespace

import flask
import pytest

from daybook.config import BaseConfig
from daybook.logging_config import JSONFormatter, get_logger, setup_logging


def _record(**kwargs) -> logging.LogRecord:
    fields = {
        "name": "test.logger",
        "level": logging.INFO,
        "pathname": "test.py",
        "lineno": 42,
        "msg": "Test message",
        "args": (),
        "exc_info": None,
    }
    fields.update(kwargs)
    record = logging.LogRecord(**fields)
    record.module = "test_module"
    record.funcName = "test_function"
    return record


@pytest.fixture
def config(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DAYBOOK_DATA_DIR", str(tmp_path))
    return BaseConfig()


def test_json_formatter():
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.logger"
    assert log_data["message"] == "Test message"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_with_extra_fields():
    record = _record()
    record.user_id = 7
    record.session_id = 3

    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["extra"] == {"user_id": 7, "session_id": 3}


def test_json_formatter_with_exception():
    """Test that JSONFormatter correctly handles exceptions."""
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(
        JSONFormatter().format(_record(level=logging.ERROR, msg="Error occurred", exc_info=exc_info))
    )

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None


def test_setup_logging(config, tmp_path):
    """Test that logging setup creates log files with rotation."""
    config.DEV_MODE = True

    logger = setup_logging(config)

    assert logger.name == "daybook"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 2  # Console + File

    log_file = tmp_path / "logs" / "daybook.log"
    assert log_file.exists()

    logger.info("Test info message")
    logger.warning("Test warning message", extra={"user_id": 1})
    for handler in logger.handlers:
        handler.flush()

    lines = [line for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()]
    assert len(lines) >= 3
    entries = [json.loads(line) for line in lines]
    assert all({"timestamp", "level", "message"} <= set(entry) for entry in entries)
    assert entries[-1]["extra"] == {"user_id": 1}


def test_setup_logging_does_not_stack_handlers(config):
    setup_logging(config)
    logger = setup_logging(config)

    assert len(logger.handlers) == 2


def test_get_logger():
    """Test that get_logger returns properly namespaced loggers."""
    logger1 = get_logger("module1")
    logger2 = get_logger("daybook.services.auth")

    assert logger1.name == "daybook.module1"
    assert logger2.name == "daybook.services.auth"
    assert logger1 != logger2


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(config, dev_mode):
    """Test that console logging level adjusts based on dev mode."""
    config.DEV_MODE = dev_mode

    logger = setup_logging(config)

    console_handler = None
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(
            handler, logging.handlers.RotatingFileHandler
        ):
            console_handler = handler
            break

    assert console_handler is not None
    expected_level = logging.INFO if dev_mode else logging.WARNING
    assert console_handler.level == expected_level


def test_json_formatter_adds_request_context(app):
    formatter = JSONFormatter()

    with app.test_request_context("/api/sessions/start", method="POST"):
        anonymous = json.loads(formatter.format(_record()))
        flask.g.current_user = SimpleNamespace(id=5)
        authenticated = json.loads(formatter.format(_record()))

    assert anonymous["request"] == {
        "method": "POST",
        "path": "/api/sessions/start",
        "remote_addr": "127.0.0.1",
    }
    assert authenticated["request"]["user_id"] == 5
    assert "request" not in json.loads(formatter.format(_record()))
