"""Goal tracking and vision board services."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..errors import ValidationFailed
from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelGoalRepository
from ..logging_config import get_logger
from ..models.goal import Goal, GoalType
from ..timeutils import utcnow

logger = get_logger(__name__)


def get_goal(goal_id: int, *, session_factory: SessionFactory) -> Optional[Goal]:
    return SQLModelGoalRepository(session_factory).get_by_id(goal_id)


def create_goal(
    user_id: int,
    *,
    goal_type: str,
    title: str,
    description: str = "",
    target_value: int,
    unit: str,
    start_date: datetime,
    end_date: datetime,
    session_factory: SessionFactory,
) -> Goal:
    if end_date <= start_date:
        raise ValidationFailed("End date must be after start date")
    goal = Goal(
        user_id=user_id,
        type=goal_type,
        title=title.strip(),
        description=(description or "").strip(),
        target_value=target_value,
        current_value=0,
        unit=unit.strip(),
        start_date=start_date,
        end_date=end_date,
    )
    goal.refresh_progress()
    return SQLModelGoalRepository(session_factory).create(goal)


def list_goals(
    user_id: int, *, goal_type: Optional[str] = None, session_factory: SessionFactory
) -> list[Goal]:
    return SQLModelGoalRepository(session_factory).list_all(user_id=user_id, goal_type=goal_type)


def update_progress(goal: Goal, *, increment: int, session_factory: SessionFactory) -> Goal:
    """Add ``increment`` (may be negative) to the goal's current value."""

    was_completed = goal.is_completed
    goal.apply_increment(increment)
    goal = SQLModelGoalRepository(session_factory).update(goal)
    if goal.is_completed and not was_completed:
        logger.info("Goal completed", extra={"goal_id": goal.id, "user_id": goal.user_id})
    return goal


def vision_board(user_id: int, *, session_factory: SessionFactory) -> list[Goal]:
    return SQLModelGoalRepository(session_factory).list_vision_board(user_id=user_id)


def attach_vision_image(goal: Goal, *, image_url: str, session_factory: SessionFactory) -> Goal:
    if goal.type != GoalType.YEARLY.value:
        raise ValidationFailed("Only yearly goals can be added to vision board")
    goal.image_url = image_url
    goal.updated_at = utcnow()
    return SQLModelGoalRepository(session_factory).update(goal)


def delete_goal(goal: Goal, *, session_factory: SessionFactory) -> None:
    SQLModelGoalRepository(session_factory).delete(goal.id)


__all__ = [
    "attach_vision_image",
    "create_goal",
    "delete_goal",
    "get_goal",
    "list_goals",
    "update_progress",
    "vision_board",
]
