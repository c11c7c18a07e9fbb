"""Habit service helpers for streaks and daily completion."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Collection, Optional

from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelHabitRepository
from ..logging_config import get_logger
from ..models.habit import DEFAULT_ICON, Habit
from ..timeutils import utc_today, utcnow

logger = get_logger(__name__)


def advance_streak(
    current: int, longest: int, completed_days: Collection[date], day: date
) -> Optional[tuple[int, int]]:
    """Return (current_streak, longest_streak) after completing ``day``.

    Returns ``None`` when ``day`` is already completed.
    """

    if day in completed_days:
        return None
    if day - timedelta(days=1) in completed_days:
        current += 1
    else:
        current = 1
    return current, max(longest, current)


def get_habit(habit_id: int, *, session_factory: SessionFactory) -> Optional[Habit]:
    return SQLModelHabitRepository(session_factory).get_by_id(habit_id)


def create_habit(
    user_id: int, *, name: str, icon: Optional[str] = None, session_factory: SessionFactory
) -> Habit:
    habit = Habit(user_id=user_id, name=name.strip(), icon=(icon or "").strip() or DEFAULT_ICON)
    return SQLModelHabitRepository(session_factory).create(habit)


def list_habits(
    user_id: int, *, session_factory: SessionFactory, today: Optional[date] = None
) -> list[dict]:
    """Serialized habits, newest first, with their completion days."""

    repo = SQLModelHabitRepository(session_factory)
    habits = repo.list_all(user_id=user_id)
    days = repo.completed_days_for(habit.id for habit in habits)
    today = today or utc_today()
    return [habit.to_dict(days.get(habit.id, set()), today=today) for habit in habits]


def complete_habit(
    habit: Habit, *, session_factory: SessionFactory, today: Optional[date] = None
) -> tuple[Habit, set[date], bool]:
    """Mark ``habit`` done for the UTC day.

    Returns the habit, its completion days, and whether anything changed.
    """

    repo = SQLModelHabitRepository(session_factory)
    today = today or utc_today()
    days = repo.completed_days(habit.id)
    streaks = advance_streak(habit.current_streak, habit.longest_streak, days, today)
    if streaks is None:
        return habit, days, False

    habit.current_streak, habit.longest_streak = streaks
    habit.updated_at = utcnow()
    habit = repo.record_completion(habit, today)
    logger.info(
        "Habit completed",
        extra={"habit_id": habit.id, "user_id": habit.user_id, "streak": habit.current_streak},
    )
    return habit, days | {today}, True


def delete_habit(habit: Habit, *, session_factory: SessionFactory) -> None:
    SQLModelHabitRepository(session_factory).delete(habit.id)


__all__ = [
    "advance_streak",
    "complete_habit",
    "create_habit",
    "delete_habit",
    "get_habit",
    "list_habits",
]
