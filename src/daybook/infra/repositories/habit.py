"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional

from sqlmodel import select

from ...models.habit import Habit, HabitEntry
from ..database import SessionFactory


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int) -> list[Habit]:
        """List a user's habits, newest first."""
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(Habit.user_id == user_id)
                .order_by(Habit.created_at.desc(), Habit.id.desc())  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def delete(self, habit_id: int) -> None:
        """Delete a habit together with its completion entries."""
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            if habit:
                session.delete(habit)
                session.commit()

    # Habit entry operations
    def completed_days(self, habit_id: int) -> set[date]:
        return self.completed_days_for([habit_id]).get(habit_id, set())

    def completed_days_for(self, habit_ids: Iterable[int]) -> dict[int, set[date]]:
        """Map each habit id to its set of completion days."""
        ids = list(habit_ids)
        if not ids:
            return {}
        with self.session_factory() as session:
            rows = session.exec(
                select(HabitEntry.habit_id, HabitEntry.occurred_on).where(
                    HabitEntry.habit_id.in_(ids)  # type: ignore[attr-defined]
                )
            ).all()
        days: dict[int, set[date]] = defaultdict(set)
        for habit_id, occurred_on in rows:
            days[habit_id].add(occurred_on)
        return dict(days)

    def record_completion(self, habit: Habit, day: date) -> Habit:
        """Persist the entry for ``day`` and the habit's new streak counters together."""
        with self.session_factory() as session:
            session.add(HabitEntry(habit_id=habit.id, occurred_on=day, user_id=habit.user_id))
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit
