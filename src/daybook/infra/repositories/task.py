"""SQLModel implementation of the daily task repository."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import select

from ...models.task import DailyTask
from ..database import SessionFactory


class SQLModelTaskRepository:
    """SQLModel-based daily task repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, task_id: int) -> Optional[DailyTask]:
        with self.session_factory() as session:
            obj = session.get(DailyTask, task_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_between(self, *, user_id: int, start: datetime, end: datetime) -> list[DailyTask]:
        """Tasks scheduled within ``[start, end]``, oldest first."""
        with self.session_factory() as session:
            statement = (
                select(DailyTask)
                .where(DailyTask.user_id == user_id)
                .where(DailyTask.date >= start)
                .where(DailyTask.date <= end)
                .order_by(DailyTask.created_at, DailyTask.id)  # type: ignore
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, task: DailyTask) -> DailyTask:
        with self.session_factory() as session:
            session.add(task)
            session.commit()
            session.refresh(task)
            session.expunge(task)
            return task

    def update(self, task: DailyTask) -> DailyTask:
        with self.session_factory() as session:
            session.add(task)
            session.commit()
            session.refresh(task)
            session.expunge(task)
            return task

    def delete(self, task_id: int) -> None:
        with self.session_factory() as session:
            obj = session.get(DailyTask, task_id)
            if obj:
                session.delete(obj)
                session.commit()
