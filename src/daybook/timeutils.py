"""UTC time helpers.

All timestamps are stored as naive datetimes in UTC, and calendar-day
comparisons (habit streaks, daily tasks) truncate in UTC.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, time, timezone


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    return utcnow().date()


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_datetime(value: object, *, end_of_day: bool = False) -> datetime:
    """Parse ISO-8601 input into a naive UTC datetime.

    Date-only strings resolve to the start of the day, or the last instant of
    the day when ``end_of_day`` is set (inclusive range ends).

    Raises:
        ValueError: if the value cannot be interpreted as a date/time.
    """

    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.max if end_of_day else time.min)
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Enter a valid date (YYYY-MM-DD or ISO-8601 timestamp).")

    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise ValueError("Enter a valid date (YYYY-MM-DD or ISO-8601 timestamp).") from exc
    if len(raw) == 10:
        return datetime.combine(parsed.date(), time.max if end_of_day else time.min)
    return to_naive_utc(parsed)


def isoformat(value: datetime | None) -> str | None:
    """Render a stored UTC datetime as ISO-8601 with a ``Z`` suffix."""

    if value is None:
        return None
    return to_naive_utc(value).isoformat(timespec="milliseconds") + "Z"


def day_bounds(day: date) -> tuple[datetime, datetime]:
    """Inclusive ``[start, end]`` datetimes covering one UTC calendar day."""

    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def month_bounds(moment: datetime) -> tuple[datetime, datetime]:
    """Inclusive bounds of the calendar month containing ``moment``."""

    last_day = monthrange(moment.year, moment.month)[1]
    start = datetime(moment.year, moment.month, 1)
    end = datetime.combine(date(moment.year, moment.month, last_day), time.max)
    return start, end


def months_ago(moment: datetime, months: int) -> datetime:
    """Return ``moment`` shifted back by whole months, clamping the day."""

    total = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    day = min(moment.day, monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
