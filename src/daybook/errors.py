"""Application errors and the centralized JSON error translator."""

from __future__ import annotations

import re
import traceback

from flask import Flask, current_app, jsonify, request
from itsdangerous import BadData, SignatureExpired
from pydantic import ValidationError
from sqlalchemy.exc import DataError, IntegrityError
from werkzeug.exceptions import HTTPException

from .logging_config import get_logger

logger = get_logger(__name__)

_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (?P<columns>[\w.,\s]+)")
_POSTGRES_UNIQUE = re.compile(r"Key \((?P<columns>[^)]+)\)=")


class ApiError(Exception):
    """An error raised on purpose by handlers, carrying an HTTP status."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(ApiError):
    status_code = 400


class AuthenticationFailed(ApiError):
    status_code = 401


class PermissionDenied(ApiError):
    status_code = 403


class ResourceNotFound(ApiError):
    status_code = 404


def _duplicate_field(exc: IntegrityError) -> str:
    """Pull the offending column name out of a unique-constraint failure."""

    text = str(exc.orig) if exc.orig is not None else str(exc)
    match = _SQLITE_UNIQUE.search(text) or _POSTGRES_UNIQUE.search(text)
    if not match:
        return "Resource"
    first = match.group("columns").split(",")[-1].strip()
    return first.rsplit(".", 1)[-1]


def _format_validation_error(exc: ValidationError) -> str:
    parts: list[str] = []
    for error in exc.errors(include_url=False):
        loc = ".".join(str(item) for item in error.get("loc", ()))
        message = error.get("msg", "Invalid value")
        # pydantic prefixes custom ValueErrors with "Value error, "
        message = message.removeprefix("Value error, ")
        parts.append(f"{loc}: {message}" if loc else message)
    return f"Validation Error: {', '.join(parts)}"


def translate_exception(exc: Exception) -> tuple[int, str]:
    """Map any exception raised by a handler to ``(status, message)``."""

    if isinstance(exc, ApiError):
        return exc.status_code, exc.message
    if isinstance(exc, ValidationError):
        return 400, _format_validation_error(exc)
    if isinstance(exc, IntegrityError):
        return 400, f"{_duplicate_field(exc)} already exists"
    if isinstance(exc, DataError):
        return 400, "Invalid resource ID format"
    if isinstance(exc, SignatureExpired):
        return 401, "Token expired"
    if isinstance(exc, BadData):
        return 401, "Invalid token"
    if isinstance(exc, HTTPException):
        code = exc.code or 500
        if code == 404:
            return 404, "Route not found"
        if code == 429:
            return 429, "Too many requests from this IP, please try again later."
        return code, exc.description or exc.name
    return 500, "Internal Server Error"


def register_error_handlers(app: Flask) -> None:
    """Funnel every uncaught exception through one JSON translator."""

    @app.errorhandler(Exception)
    def _handle_error(exc: Exception):
        status, message = translate_exception(exc)
        if status >= 500:
            logger.error(
                "Unhandled error on %s %s",
                request.method,
                request.path,
                exc_info=exc,
            )
        body: dict[str, object] = {"success": False, "error": message}
        if status == 404 and isinstance(exc, HTTPException):
            body["message"] = f"Cannot {request.method} {request.path}"
        config = current_app.config.get("DAYBOOK_CONFIG")
        if config is not None and config.DEV_MODE and not isinstance(exc, HTTPException):
            body["stack"] = "".join(traceback.format_exception(exc))
        response = jsonify(body)
        response.status_code = status
        if status == 405:
            response.headers["Allow"] = ", ".join(getattr(exc, "valid_methods", None) or [])
        return response


__all__ = [
    "ApiError",
    "AuthenticationFailed",
    "PermissionDenied",
    "ResourceNotFound",
    "ValidationFailed",
    "register_error_handlers",
    "translate_exception",
]
