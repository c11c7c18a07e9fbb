"""Response envelope and request parsing shared by the API blueprints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, TypeVar

from flask import jsonify, request
from pydantic import BaseModel

from ..errors import ValidationFailed
from ..infra.repositories.common import PageRequest
from ..timeutils import parse_datetime

FormT = TypeVar("FormT", bound=BaseModel)


def success(
    data: Optional[dict[str, Any]] = None, *, message: Optional[str] = None, status: int = 200
):
    """Build the ``{success, message?, data?}`` envelope."""

    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    response = jsonify(body)
    response.status_code = status
    return response


def json_payload() -> dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def parse_form(form_cls: type[FormT]) -> FormT:
    """Validate the JSON body; pydantic errors reach the error translator."""
    return form_cls.model_validate(json_payload())


def page_request() -> PageRequest:
    return PageRequest.from_args(request.args)


def query_datetime(name: str, *, end_of_day: bool = False) -> Optional[datetime]:
    raw = request.args.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return parse_datetime(raw, end_of_day=end_of_day)
    except ValueError as exc:
        raise ValidationFailed(f"Invalid {name}: {raw}") from exc


def query_date(name: str) -> Optional[date]:
    value = query_datetime(name)
    return value.date() if value is not None else None


def query_int(
    name: str, default: int, *, minimum: int = 1, maximum: Optional[int] = None
) -> int:
    """Integer query parameter; junk or values below ``minimum`` give ``default``."""

    raw = request.args.get(name)
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    if value < minimum:
        return default
    return min(value, maximum) if maximum is not None else value


__all__ = [
    "json_payload",
    "page_request",
    "parse_form",
    "query_date",
    "query_datetime",
    "query_int",
    "success",
]
