"""Time-tracking session records."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional

from sqlalchemy import Index, UniqueConstraint, text
from sqlmodel import Field, SQLModel

from ..timeutils import isoformat, utcnow

TAG_MAX_LENGTH = 50
EXPERIENCE_MAX_LENGTH = 2000


class SessionStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


def compute_duration_ms(start: datetime, end: datetime) -> int:
    """Milliseconds between ``start`` and ``end``, floored at zero."""

    elapsed = end - start
    millis = elapsed.days * 86_400_000 + elapsed.seconds * 1000 + elapsed.microseconds // 1000
    return max(0, millis)


def format_duration(duration_ms: int) -> str:
    """Render a duration as e.g. ``"1 hour, 5 minutes"``."""

    hours = duration_ms // 3_600_000
    minutes = (duration_ms % 3_600_000) // 60_000

    def _plural(value: int, unit: str) -> str:
        return f"{value} {unit}{'' if value == 1 else 's'}"

    if hours == 0:
        return _plural(minutes, "minute")
    if minutes == 0:
        return _plural(hours, "hour")
    return f"{_plural(hours, 'hour')}, {_plural(minutes, 'minute')}"


def normalize_tag(tag: Optional[str]) -> Optional[str]:
    if tag is None:
        return None
    cleaned = tag.strip()[:TAG_MAX_LENGTH]
    return cleaned or None


class TimeSession(SQLModel, table=True):
    """A stretch of tracked time; at most one may be active per user."""

    __tablename__: ClassVar[str] = "time_session"
    __table_args__ = (
        UniqueConstraint("user_id", "session_number", name="uq_time_session_user_number"),
        Index(
            "uq_time_session_one_active",
            "user_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    session_number: int = Field(nullable=False, ge=1)
    start_date_time: datetime = Field(nullable=False, index=True)
    end_date_time: Optional[datetime] = Field(default=None)
    duration: int = Field(default=0, nullable=False, description="Milliseconds")
    experience: str = Field(default="", max_length=EXPERIENCE_MAX_LENGTH)
    tag: Optional[str] = Field(default=None, max_length=TAG_MAX_LENGTH)
    status: str = Field(default=SessionStatus.ACTIVE.value, nullable=False, max_length=16, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE.value

    def complete(
        self,
        *,
        end: datetime,
        experience: Optional[str] = None,
        tag: Optional[str] = None,
        set_tag: bool = False,
    ) -> None:
        """Close the session at ``end`` and derive its duration."""

        self.end_date_time = end
        self.duration = compute_duration_ms(self.start_date_time, end)
        self.status = SessionStatus.COMPLETED.value
        self.experience = (experience or "").strip()
        if set_tag:
            self.tag = normalize_tag(tag)
        self.updated_at = utcnow()

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "sessionNumber": self.session_number,
            "startDateTime": isoformat(self.start_date_time),
            "endDateTime": isoformat(self.end_date_time),
            "duration": self.duration,
            "formattedDuration": format_duration(self.duration),
            "experience": self.experience,
            "tag": self.tag,
            "status": self.status,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
