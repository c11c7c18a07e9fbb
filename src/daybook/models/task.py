"""Daily task records."""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Optional

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from ..timeutils import isoformat, utcnow


class DailyTask(SQLModel, table=True):
    """A to-do scheduled for a calendar day."""

    __tablename__: ClassVar[str] = "daily_task"
    __table_args__ = (Index("ix_daily_task_user_date", "user_id", "date"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    title: str = Field(nullable=False, max_length=200)
    description: str = Field(default="", max_length=500)
    is_completed: bool = Field(default=False, nullable=False, index=True)
    completed_at: Optional[datetime] = Field(default=None)
    date: datetime = Field(nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    def toggle(self, *, now: datetime) -> None:
        """Flip completion; the timestamp follows the flag."""

        self.is_completed = not self.is_completed
        self.completed_at = now if self.is_completed else None
        self.updated_at = now

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "isCompleted": self.is_completed,
            "completedAt": isoformat(self.completed_at),
            "date": isoformat(self.date),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
