"""Authentication and user management services."""

from __future__ import annotations

from typing import Any, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from ..errors import AuthenticationFailed, ResourceNotFound, ValidationFailed
from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelUserRepository
from ..logging_config import get_logger
from ..models.user import User
from ..timeutils import utcnow

logger = get_logger(__name__)

_hasher = PasswordHasher()

EMAIL_TAKEN = "User with this email already exists"
USERNAME_TAKEN = "Username is already taken"


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerifyMismatchError, InvalidHash, VerificationError):
        return False


def _ensure_unique(
    repo: SQLModelUserRepository,
    *,
    email: Optional[str],
    username: Optional[str],
    exclude_id: Optional[int] = None,
) -> None:
    conflicts = repo.find_conflicts(email=email, username=username, exclude_id=exclude_id)
    if email and any(other.email == email for other in conflicts):
        raise ValidationFailed(EMAIL_TAKEN)
    if conflicts:
        raise ValidationFailed(USERNAME_TAKEN)


def get_user(user_id: int, session_factory: SessionFactory) -> Optional[User]:
    """Fetch a user by id."""
    return SQLModelUserRepository(session_factory).get_by_id(user_id)


def register_user(
    *,
    name: str,
    username: str,
    email: str,
    password: str,
    session_factory: SessionFactory,
) -> User:
    """Create a new user with hashed password.

    Email and username are expected to be normalized (trimmed, lowercase).
    """

    repo = SQLModelUserRepository(session_factory)
    _ensure_unique(repo, email=email, username=username)
    user = repo.create(
        User(
            name=name,
            username=username,
            email=email,
            password_hash=hash_password(password),
        )
    )
    logger.info("User registered", extra={"user_id": user.id, "username": user.username})
    return user


def authenticate(*, email: str, password: str, session_factory: SessionFactory) -> User:
    """Validate credentials and return the matching user."""

    user = SQLModelUserRepository(session_factory).get_by_email(email)
    if user is None or not verify_password(user.password_hash, password):
        logger.info("Login failed", extra={"email": email})
        raise AuthenticationFailed("Invalid email or password")
    return user


def update_profile(
    user_id: int, *, changes: dict[str, Any], session_factory: SessionFactory
) -> User:
    """Apply profile changes, re-checking email/username uniqueness."""

    repo = SQLModelUserRepository(session_factory)
    user = repo.get_by_id(user_id)
    if user is None:
        raise ResourceNotFound("User not found")

    email = changes.get("email")
    username = changes.get("username")
    _ensure_unique(
        repo,
        email=email if email and email != user.email else None,
        username=username if username and username != user.username else None,
        exclude_id=user.id,
    )

    for field in ("name", "username", "email"):
        if changes.get(field):
            setattr(user, field, changes[field])
    if "avatar" in changes:
        user.avatar = changes["avatar"]
    user.updated_at = utcnow()
    return repo.update(user)


def change_password(
    user_id: int,
    *,
    current_password: str,
    new_password: str,
    session_factory: SessionFactory,
) -> None:
    """Replace a user's password after verifying the current one."""

    repo = SQLModelUserRepository(session_factory)
    user = repo.get_by_id(user_id)
    if user is None:
        raise ResourceNotFound("User not found")
    if not verify_password(user.password_hash, current_password):
        raise ValidationFailed("Current password is incorrect")

    user.password_hash = hash_password(new_password)
    user.updated_at = utcnow()
    repo.update(user)
    logger.info("Password changed", extra={"user_id": user.id})


__all__ = [
    "authenticate",
    "change_password",
    "get_user",
    "hash_password",
    "register_user",
    "update_profile",
    "verify_password",
]
