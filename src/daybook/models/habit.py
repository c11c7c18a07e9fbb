"""Habits tracking data structures."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, ClassVar, Iterable, Optional

from sqlalchemy.orm import relationship
from sqlmodel import Field, Relationship, SQLModel

from ..timeutils import isoformat, utcnow

DEFAULT_ICON = "⭐"


class Habit(SQLModel, table=True):
    """A user-defined habit completed at most once per calendar day."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=100)
    icon: str = Field(default=DEFAULT_ICON, max_length=10)
    current_streak: int = Field(default=0, nullable=False)
    longest_streak: int = Field(default=0, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    entries: list["HabitEntry"] = Relationship(
        back_populates="habit",
        sa_relationship=relationship(
            "HabitEntry", back_populates="habit", cascade="all, delete-orphan"
        ),
    )

    def to_dict(self, completed_dates: Iterable[date], *, today: date) -> dict[str, Any]:
        days = sorted(completed_dates)
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "completedDates": [day.isoformat() for day in days],
            "isCompletedToday": today in days,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }


class HabitEntry(SQLModel, table=True):
    """Completion record for a habit on one UTC calendar day."""

    __tablename__: ClassVar[str] = "habit_entry"

    habit_id: int = Field(foreign_key="habit.id", primary_key=True)
    occurred_on: date = Field(primary_key=True, index=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)

    habit: "Habit" = Relationship(
        back_populates="entries",
        sa_relationship=relationship("Habit", back_populates="entries"),
    )
