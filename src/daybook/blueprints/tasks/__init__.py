"""Habits and daily tasks blueprint package."""

from __future__ import annotations

from flask import Blueprint

from ...security import require_user

bp = Blueprint("tasks", __name__, url_prefix="/api/tasks")
bp.before_request(require_user)

from . import routes  # noqa: E402,F401 - ensure routes get registered

__all__ = ["bp"]
