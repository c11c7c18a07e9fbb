"""Goal and vision board routes."""

from __future__ import annotations

from functools import partial

from flask import g, request

from ...errors import ValidationFailed
from ...extensions import get_session_factory
from ...models.goal import GoalType
from ...security import load_owned
from ...services import goals as goal_service
from ..common import parse_form, success
from . import bp
from .forms import GoalForm, ProgressForm, VisionImageForm


def _owned_goal(goal_id: str):
    loader = partial(goal_service.get_goal, session_factory=get_session_factory())
    return load_owned(loader, goal_id, user_id=g.current_user.id, label="Goal")


@bp.post("/")
def create_goal():
    form = parse_form(GoalForm)
    goal = goal_service.create_goal(
        g.current_user.id,
        goal_type=form.type.value,
        title=form.title,
        description=form.description,
        target_value=form.target_value,
        unit=form.unit,
        start_date=form.start_date,
        end_date=form.end_date,
        session_factory=get_session_factory(),
    )
    return success({"goal": goal.to_dict()}, message="Goal created successfully", status=201)


@bp.get("/")
def list_goals():
    goal_type = request.args.get("type") or None
    if goal_type is not None and goal_type not in {item.value for item in GoalType}:
        raise ValidationFailed("Type must be weekly, monthly, or yearly")
    goals = goal_service.list_goals(
        g.current_user.id, goal_type=goal_type, session_factory=get_session_factory()
    )
    return success({"goals": [goal.to_dict() for goal in goals]})


@bp.get("/vision")
def vision_board():
    goals = goal_service.vision_board(g.current_user.id, session_factory=get_session_factory())
    return success({"visionBoard": [goal.to_dict() for goal in goals]})


@bp.put("/<goal_id>/progress")
def update_progress(goal_id: str):
    goal = _owned_goal(goal_id)
    form = parse_form(ProgressForm)
    goal = goal_service.update_progress(
        goal, increment=form.increment, session_factory=get_session_factory()
    )
    return success({"goal": goal.to_dict()}, message="Goal progress updated successfully")


@bp.put("/<goal_id>/vision")
def add_vision_image(goal_id: str):
    goal = _owned_goal(goal_id)
    form = parse_form(VisionImageForm)
    goal = goal_service.attach_vision_image(
        goal, image_url=form.image_url, session_factory=get_session_factory()
    )
    return success(
        {"goal": goal.to_dict()}, message="Image added to vision board successfully"
    )


@bp.delete("/<goal_id>")
def delete_goal(goal_id: str):
    goal = _owned_goal(goal_id)
    goal_service.delete_goal(goal, session_factory=get_session_factory())
    return success(message="Goal deleted successfully")
