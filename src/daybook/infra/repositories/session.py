"""SQLModel implementation of the time-session repository."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlmodel import select

from ...models.session import SessionStatus, TimeSession
from ..database import SessionFactory
from .common import PageRequest, order_by_clause

SORTABLE_COLUMNS = {
    "startDateTime": TimeSession.start_date_time,
    "endDateTime": TimeSession.end_date_time,
    "duration": TimeSession.duration,
    "sessionNumber": TimeSession.session_number,
    "createdAt": TimeSession.created_at,
}
DEFAULT_SORT = "-startDateTime"


class SQLModelSessionRepository:
    """SQLModel-based time-session repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, session_id: int) -> Optional[TimeSession]:
        with self.session_factory() as session:
            obj = session.get(TimeSession, session_id)
            if obj:
                session.expunge(obj)
            return obj

    def find_active(self, *, user_id: int) -> Optional[TimeSession]:
        """Return the user's active session, if any."""
        with self.session_factory() as session:
            obj = session.exec(
                select(TimeSession)
                .where(TimeSession.user_id == user_id)
                .where(TimeSession.status == SessionStatus.ACTIVE.value)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def next_session_number(self, *, user_id: int) -> int:
        with self.session_factory() as session:
            last = session.exec(
                select(func.max(TimeSession.session_number)).where(
                    TimeSession.user_id == user_id
                )
            ).one()
            return (last or 0) + 1

    def create(self, record: TimeSession) -> TimeSession:
        with self.session_factory() as session:
            session.add(record)
            session.commit()
            session.refresh(record)
            session.expunge(record)
            return record

    def update(self, record: TimeSession) -> TimeSession:
        with self.session_factory() as session:
            session.add(record)
            session.commit()
            session.refresh(record)
            session.expunge(record)
            return record

    def delete(self, session_id: int) -> None:
        with self.session_factory() as session:
            obj = session.get(TimeSession, session_id)
            if obj:
                session.delete(obj)
                session.commit()

    def search(
        self,
        *,
        user_id: int,
        page: PageRequest,
        status: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        sort: Optional[str] = None,
    ) -> tuple[list[TimeSession], int]:
        """Filtered, sorted page of sessions plus the unpaged total."""
        with self.session_factory() as session:
            conditions = [TimeSession.user_id == user_id]
            if status:
                conditions.append(TimeSession.status == status)
            if start_date:
                conditions.append(TimeSession.start_date_time >= start_date)
            if end_date:
                conditions.append(TimeSession.start_date_time <= end_date)

            total = session.exec(
                select(func.count()).select_from(TimeSession).where(*conditions)
            ).one()
            statement = (
                select(TimeSession)
                .where(*conditions)
                .order_by(order_by_clause(sort, SORTABLE_COLUMNS, DEFAULT_SORT))
                .offset(page.offset)
                .limit(page.limit)
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows, total

    def counts_by_status(self, *, user_id: int) -> dict[str, int]:
        with self.session_factory() as session:
            rows = session.exec(
                select(TimeSession.status, func.count())
                .where(TimeSession.user_id == user_id)
                .group_by(TimeSession.status)
            ).all()
            return {status: count for status, count in rows}

    def completed_duration_stats(self, *, user_id: int) -> tuple[int, float]:
        """Return (total, average) duration of completed sessions in ms."""
        with self.session_factory() as session:
            total, average = session.exec(
                select(func.sum(TimeSession.duration), func.avg(TimeSession.duration))
                .where(TimeSession.user_id == user_id)
                .where(TimeSession.status == SessionStatus.COMPLETED.value)
            ).one()
            return int(total or 0), float(average or 0)

    def list_completed(
        self, *, user_id: int, since: Optional[datetime] = None
    ) -> list[TimeSession]:
        """Completed sessions that started at or after ``since``."""
        with self.session_factory() as session:
            statement = (
                select(TimeSession)
                .where(TimeSession.user_id == user_id)
                .where(TimeSession.status == SessionStatus.COMPLETED.value)
            )
            if since is not None:
                statement = statement.where(TimeSession.start_date_time >= since)
            rows = list(session.exec(statement.order_by(TimeSession.start_date_time)).all())
            session.expunge_all()
            return rows
