"""Habit and daily task routes."""

from __future__ import annotations

from functools import partial

from flask import g

from ...extensions import get_session_factory
from ...security import load_owned
from ...services import habits as habit_service
from ...services import tasks as task_service
from ...timeutils import utc_today
from ..common import parse_form, query_date, success
from . import bp
from .forms import DailyTaskForm, HabitForm


def _owned_habit(habit_id: str):
    loader = partial(habit_service.get_habit, session_factory=get_session_factory())
    return load_owned(loader, habit_id, user_id=g.current_user.id, label="Habit")


def _owned_task(task_id: str):
    loader = partial(task_service.get_task, session_factory=get_session_factory())
    return load_owned(loader, task_id, user_id=g.current_user.id, label="Task")


@bp.post("/habits")
def create_habit():
    form = parse_form(HabitForm)
    habit = habit_service.create_habit(
        g.current_user.id, name=form.name, icon=form.icon, session_factory=get_session_factory()
    )
    return success(
        {"habit": habit.to_dict((), today=utc_today())},
        message="Habit created successfully",
        status=201,
    )


@bp.get("/habits")
def list_habits():
    habits = habit_service.list_habits(g.current_user.id, session_factory=get_session_factory())
    return success({"habits": habits})


@bp.put("/habits/<habit_id>/complete")
def complete_habit(habit_id: str):
    habit = _owned_habit(habit_id)
    today = utc_today()
    habit, days, changed = habit_service.complete_habit(
        habit, session_factory=get_session_factory(), today=today
    )
    message = "Habit completed for today!" if changed else "Habit already completed today"
    return success({"habit": habit.to_dict(days, today=today)}, message=message)


@bp.delete("/habits/<habit_id>")
def delete_habit(habit_id: str):
    habit = _owned_habit(habit_id)
    habit_service.delete_habit(habit, session_factory=get_session_factory())
    return success(message="Habit deleted successfully")


@bp.post("/daily")
def create_daily_task():
    form = parse_form(DailyTaskForm)
    task = task_service.create_task(
        g.current_user.id,
        title=form.title,
        description=form.description,
        scheduled=form.date,
        session_factory=get_session_factory(),
    )
    return success({"task": task.to_dict()}, message="Daily task created successfully", status=201)


@bp.get("/daily")
def list_daily_tasks():
    day = query_date("date") or utc_today()
    tasks = task_service.tasks_for_day(
        g.current_user.id, day=day, session_factory=get_session_factory()
    )
    return success({"tasks": [task.to_dict() for task in tasks], "date": day.isoformat()})


@bp.put("/daily/<task_id>/toggle")
def toggle_task(task_id: str):
    task = _owned_task(task_id)
    task = task_service.toggle_task(task, session_factory=get_session_factory())
    message = "Task completed!" if task.is_completed else "Task marked as incomplete"
    return success({"task": task.to_dict()}, message=message)


@bp.delete("/daily/<task_id>")
def delete_daily_task(task_id: str):
    task = _owned_task(task_id)
    task_service.delete_task(task, session_factory=get_session_factory())
    return success(message="Task deleted successfully")
