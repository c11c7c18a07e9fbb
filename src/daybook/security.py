"""Bearer-token authentication and ownership checks."""

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional, TypeVar

from flask import current_app, g, request
from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer

from .errors import AuthenticationFailed, PermissionDenied, ResourceNotFound, ValidationFailed
from .extensions import get_session_factory
from .models.user import User
from .services.auth import get_user

TOKEN_SALT = "daybook-auth"

T = TypeVar("T")


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=TOKEN_SALT)


def issue_token(user_id: int) -> str:
    """Sign a token embedding ``user_id``."""
    return _serializer().dumps({"user_id": user_id})


def _token_from_header() -> str:
    header = request.headers.get("Authorization")
    if not header:
        raise AuthenticationFailed("Access denied. No token provided.")
    if not header.startswith("Bearer "):
        raise AuthenticationFailed("Access denied. Invalid token format.")
    token = header[len("Bearer "):].strip()
    if not token:
        raise AuthenticationFailed("Access denied. No token provided.")
    return token


def resolve_user() -> User:
    """Verify the request's bearer token and load its user."""

    token = _token_from_header()
    max_age = current_app.config["DAYBOOK_CONFIG"].TOKEN_MAX_AGE
    try:
        payload = _serializer().loads(token, max_age=max_age)
    except SignatureExpired as exc:
        raise AuthenticationFailed("Access denied. Token has expired.") from exc
    except BadData as exc:
        raise AuthenticationFailed("Access denied. Invalid token.") from exc

    user_id = payload.get("user_id") if isinstance(payload, dict) else None
    if not isinstance(user_id, int):
        raise AuthenticationFailed("Access denied. Invalid token.")
    user = get_user(user_id, get_session_factory())
    if user is None:
        raise AuthenticationFailed("Access denied. User not found.")
    return user


def require_user() -> None:
    """``before_request`` hook attaching the caller to ``g.current_user``."""

    if request.method == "OPTIONS":
        return
    g.current_user = resolve_user()


def login_required(view: Callable) -> Callable:
    @wraps(view)
    def wrapper(*args, **kwargs):
        g.current_user = resolve_user()
        return view(*args, **kwargs)

    return wrapper


def parse_resource_id(raw: str) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationFailed("Invalid resource ID format") from exc
    if value < 1:
        raise ValidationFailed("Invalid resource ID format")
    return value


def load_owned(
    loader: Callable[[int], Optional[T]], raw_id: str, *, user_id: int, label: str
) -> T:
    """Load a resource by id and make sure ``user_id`` owns it.

    Raises 404 when it does not exist and 403 when it belongs to someone else.
    """

    resource = loader(parse_resource_id(raw_id))
    if resource is None:
        raise ResourceNotFound(f"{label} not found")
    if getattr(resource, "user_id") != user_id:
        raise PermissionDenied(f"Access denied. Not your {label.lower()}.")
    return resource


__all__ = [
    "issue_token",
    "load_owned",
    "login_required",
    "parse_resource_id",
    "require_user",
    "resolve_user",
]
