"""User model supporting authentication."""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Optional

from sqlmodel import Field, SQLModel

from ..timeutils import isoformat, utcnow


class User(SQLModel, table=True):
    """Application user with credentials and profile details."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=50)
    username: str = Field(nullable=False, unique=True, index=True, max_length=30)
    email: str = Field(nullable=False, unique=True, index=True, max_length=254)
    password_hash: str = Field(nullable=False, max_length=255)
    avatar: Optional[str] = Field(default=None, max_length=2048)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    def profile(self) -> dict[str, Any]:
        """Public representation; the password hash is never included."""

        return {
            "id": self.id,
            "name": self.name,
            "username": self.username,
            "email": self.email,
            "avatar": self.avatar,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
