"""Time-tracking session services."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError

from ..errors import ValidationFailed
from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelSessionRepository
from ..infra.repositories.common import PageRequest, Pagination
from ..logging_config import get_logger
from ..models.session import SessionStatus, TimeSession, normalize_tag
from ..timeutils import utcnow

logger = get_logger(__name__)

ALREADY_ACTIVE = "You already have an active session. Please stop it before starting a new one."
ANALYTICS_PERIODS = ("day", "month", "year", "all")


def get_session(session_id: int, *, session_factory: SessionFactory) -> Optional[TimeSession]:
    return SQLModelSessionRepository(session_factory).get_by_id(session_id)


def get_active_session(user_id: int, *, session_factory: SessionFactory) -> Optional[TimeSession]:
    return SQLModelSessionRepository(session_factory).find_active(user_id=user_id)


def start_session(
    user_id: int, *, session_factory: SessionFactory, now: Optional[datetime] = None
) -> TimeSession:
    """Open a new active session numbered after the user's last one."""

    repo = SQLModelSessionRepository(session_factory)
    if repo.find_active(user_id=user_id) is not None:
        raise ValidationFailed(ALREADY_ACTIVE)

    moment = now or utcnow()
    record = TimeSession(
        user_id=user_id,
        session_number=repo.next_session_number(user_id=user_id),
        start_date_time=moment,
        status=SessionStatus.ACTIVE.value,
        created_at=moment,
        updated_at=moment,
    )
    try:
        record = repo.create(record)
    except IntegrityError as exc:
        # A concurrent start won the unique index on the active slot or number.
        raise ValidationFailed(ALREADY_ACTIVE) from exc
    logger.info(
        "Session started",
        extra={"user_id": user_id, "session_id": record.id, "session_number": record.session_number},
    )
    return record


def stop_session(
    record: TimeSession,
    *,
    experience: Optional[str] = None,
    tag: Optional[str] = None,
    set_tag: bool = False,
    session_factory: SessionFactory,
    now: Optional[datetime] = None,
) -> TimeSession:
    """Complete an active session and derive its duration."""

    if not record.is_active:
        raise ValidationFailed("Session is already completed")
    record.complete(end=now or utcnow(), experience=experience, tag=tag, set_tag=set_tag)
    record = SQLModelSessionRepository(session_factory).update(record)
    logger.info(
        "Session stopped",
        extra={"user_id": record.user_id, "session_id": record.id, "duration_ms": record.duration},
    )
    return record


def update_session(
    record: TimeSession,
    *,
    experience: Optional[str] = None,
    tag: Optional[str] = None,
    set_tag: bool = False,
    session_factory: SessionFactory,
) -> TimeSession:
    """Edit the reflection note and/or tag of a session."""

    if experience is not None:
        record.experience = experience.strip()
    if set_tag:
        record.tag = normalize_tag(tag)
    record.updated_at = utcnow()
    return SQLModelSessionRepository(session_factory).update(record)


def delete_session(record: TimeSession, *, session_factory: SessionFactory) -> None:
    if record.is_active:
        raise ValidationFailed("Cannot delete active session. Please stop it first.")
    SQLModelSessionRepository(session_factory).delete(record.id)


def list_sessions(
    user_id: int,
    *,
    page: PageRequest,
    status: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    sort: Optional[str] = None,
    session_factory: SessionFactory,
) -> tuple[list[TimeSession], Pagination]:
    rows, total = SQLModelSessionRepository(session_factory).search(
        user_id=user_id,
        page=page,
        status=status,
        start_date=start_date,
        end_date=end_date,
        sort=sort,
    )
    return rows, Pagination(page=page.page, limit=page.limit, total=total)


def session_stats(user_id: int, *, session_factory: SessionFactory) -> dict[str, int]:
    """Counts by status plus total and mean completed duration (ms)."""

    repo = SQLModelSessionRepository(session_factory)
    counts = repo.counts_by_status(user_id=user_id)
    total_duration, average = repo.completed_duration_stats(user_id=user_id)
    return {
        "totalSessions": sum(counts.values()),
        "completedSessions": counts.get(SessionStatus.COMPLETED.value, 0),
        "activeSessions": counts.get(SessionStatus.ACTIVE.value, 0),
        "totalDuration": total_duration,
        "averageDuration": round(average),
    }


def period_start(period: str, now: datetime) -> Optional[datetime]:
    """First instant of the current UTC day, month or year; ``None`` for all time."""

    if period == "day":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "month":
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if period == "year":
        return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    return None


def summarize_sessions(records: list[TimeSession]) -> dict[str, Any]:
    """Bucket completed sessions by start hour and by tag, in minutes.

    ``totalTime`` only counts tagged sessions so tag percentages add up to 100.
    """

    by_hour = [0.0] * 24
    by_tag: dict[str, float] = defaultdict(float)
    for record in records:
        minutes = record.duration / 60_000
        by_hour[record.start_date_time.hour] += minutes
        if record.tag:
            by_tag[record.tag] += minutes

    tagged_total = sum(by_tag.values())
    tags = [
        {
            "tag": tag,
            "minutes": minutes,
            "percentage": minutes / tagged_total * 100 if tagged_total > 0 else 0,
        }
        for tag, minutes in by_tag.items()
    ]
    tags.sort(key=lambda item: item["minutes"], reverse=True)
    return {
        "timeDistribution": [{"hour": hour, "minutes": minutes} for hour, minutes in enumerate(by_hour)],
        "tagDistribution": tags,
        "totalTime": tagged_total,
        "sessionCount": len(records),
    }


def session_analytics(
    user_id: int,
    *,
    period: str = "all",
    session_factory: SessionFactory,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    if period not in ANALYTICS_PERIODS:
        period = "all"
    since = period_start(period, now or utcnow())
    records = SQLModelSessionRepository(session_factory).list_completed(user_id=user_id, since=since)
    return {**summarize_sessions(records), "period": period}


__all__ = [
    "ALREADY_ACTIVE",
    "delete_session",
    "get_active_session",
    "get_session",
    "list_sessions",
    "session_analytics",
    "session_stats",
    "start_session",
    "stop_session",
    "summarize_sessions",
    "update_session",
]
