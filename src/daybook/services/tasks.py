"""Daily task services."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelTaskRepository
from ..models.task import DailyTask
from ..timeutils import day_bounds, utc_today, utcnow


def get_task(task_id: int, *, session_factory: SessionFactory) -> Optional[DailyTask]:
    return SQLModelTaskRepository(session_factory).get_by_id(task_id)


def create_task(
    user_id: int,
    *,
    title: str,
    description: str = "",
    scheduled: Optional[datetime] = None,
    session_factory: SessionFactory,
) -> DailyTask:
    task = DailyTask(
        user_id=user_id,
        title=title.strip(),
        description=(description or "").strip(),
        date=scheduled or utcnow(),
    )
    return SQLModelTaskRepository(session_factory).create(task)


def tasks_for_day(
    user_id: int, *, day: Optional[date] = None, session_factory: SessionFactory
) -> list[DailyTask]:
    """Tasks scheduled on one UTC calendar day (default today)."""

    start, end = day_bounds(day or utc_today())
    return SQLModelTaskRepository(session_factory).list_between(
        user_id=user_id, start=start, end=end
    )


def toggle_task(
    task: DailyTask, *, session_factory: SessionFactory, now: Optional[datetime] = None
) -> DailyTask:
    task.toggle(now=now or utcnow())
    return SQLModelTaskRepository(session_factory).update(task)


def delete_task(task: DailyTask, *, session_factory: SessionFactory) -> None:
    SQLModelTaskRepository(session_factory).delete(task.id)


__all__ = ["create_task", "delete_task", "get_task", "tasks_for_day", "toggle_task"]
