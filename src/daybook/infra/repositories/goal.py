"""SQLModel implementation of the goal repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import select

from ...models.goal import Goal, GoalType
from ..database import SessionFactory


class SQLModelGoalRepository:
    """SQLModel-based goal repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, goal_id: int) -> Optional[Goal]:
        with self.session_factory() as session:
            obj = session.get(Goal, goal_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, *, user_id: int, goal_type: Optional[str] = None) -> list[Goal]:
        """List goals newest first, optionally restricted to one type."""
        with self.session_factory() as session:
            statement = select(Goal).where(Goal.user_id == user_id)
            if goal_type:
                statement = statement.where(Goal.type == goal_type)
            statement = statement.order_by(Goal.created_at.desc(), Goal.id.desc())  # type: ignore
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def list_vision_board(self, *, user_id: int) -> list[Goal]:
        """Yearly goals that carry an image."""
        with self.session_factory() as session:
            statement = (
                select(Goal)
                .where(Goal.user_id == user_id)
                .where(Goal.type == GoalType.YEARLY.value)
                .where(Goal.image_url.isnot(None))  # type: ignore[union-attr]
                .order_by(Goal.created_at.desc(), Goal.id.desc())  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, goal: Goal) -> Goal:
        with self.session_factory() as session:
            session.add(goal)
            session.commit()
            session.refresh(goal)
            session.expunge(goal)
            return goal

    def update(self, goal: Goal) -> Goal:
        with self.session_factory() as session:
            session.add(goal)
            session.commit()
            session.refresh(goal)
            session.expunge(goal)
            return goal

    def delete(self, goal_id: int) -> None:
        with self.session_factory() as session:
            obj = session.get(Goal, goal_id)
            if obj:
                session.delete(obj)
                session.commit()
