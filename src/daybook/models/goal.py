"""Weekly, monthly and yearly goals."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from ..timeutils import isoformat, utcnow


class GoalType(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


def compute_progress(current_value: int, target_value: int) -> float:
    """Percentage of ``target_value`` reached, capped at 100."""

    if target_value <= 0:
        return 0.0
    return min(100.0, current_value / target_value * 100)


class Goal(SQLModel, table=True):
    """A measurable target over a date range."""

    __tablename__: ClassVar[str] = "goal"
    __table_args__ = (Index("ix_goal_user_type", "user_id", "type"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    type: str = Field(nullable=False, max_length=16)
    title: str = Field(nullable=False, max_length=200)
    description: str = Field(default="", max_length=500)
    target_value: int = Field(nullable=False)
    current_value: int = Field(default=0, nullable=False)
    unit: str = Field(nullable=False, max_length=50)
    progress: float = Field(default=0.0, nullable=False)
    start_date: datetime = Field(nullable=False)
    end_date: datetime = Field(nullable=False)
    is_completed: bool = Field(default=False, nullable=False)
    image_url: Optional[str] = Field(default=None, max_length=2048)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    def apply_increment(self, increment: int) -> None:
        """Add ``increment`` to the current value, clamped to ``[0, target]``."""

        self.current_value = max(0, min(self.target_value, self.current_value + increment))
        self.refresh_progress()

    def refresh_progress(self) -> None:
        self.progress = compute_progress(self.current_value, self.target_value)
        self.is_completed = self.progress >= 100
        self.updated_at = utcnow()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "targetValue": self.target_value,
            "currentValue": self.current_value,
            "unit": self.unit,
            "progress": round(self.progress, 2),
            "startDate": isoformat(self.start_date),
            "endDate": isoformat(self.end_date),
            "isCompleted": self.is_completed,
            "imageUrl": self.image_url,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
