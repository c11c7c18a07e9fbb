"""Session tracking routes."""

from __future__ import annotations

from functools import partial

from flask import g, request

from ...extensions import get_session_factory
from ...models.session import SessionStatus
from ...security import load_owned
from ...services import sessions as session_service
from ..common import page_request, parse_form, query_datetime, success
from . import bp
from .forms import SessionNoteForm


def _owned_session(session_id: str):
    loader = partial(session_service.get_session, session_factory=get_session_factory())
    return load_owned(loader, session_id, user_id=g.current_user.id, label="Session")


@bp.post("/start")
def start_session():
    record = session_service.start_session(
        g.current_user.id, session_factory=get_session_factory()
    )
    return success(
        {"session": record.summary()}, message="Session started successfully", status=201
    )


@bp.get("/active")
def active_session():
    record = session_service.get_active_session(
        g.current_user.id, session_factory=get_session_factory()
    )
    if record is None:
        return success({"session": None, "message": "No active session"})
    return success({"session": record.summary()})


@bp.get("/")
def list_sessions():
    status = request.args.get("status") or None
    if status is not None and status not in {item.value for item in SessionStatus}:
        status = None
    rows, pagination = session_service.list_sessions(
        g.current_user.id,
        page=page_request(),
        status=status,
        start_date=query_datetime("startDate"),
        end_date=query_datetime("endDate", end_of_day=True),
        sort=request.args.get("sort"),
        session_factory=get_session_factory(),
    )
    return success(
        {"sessions": [row.summary() for row in rows], "pagination": pagination.to_dict()}
    )


@bp.get("/stats")
def session_stats():
    stats = session_service.session_stats(g.current_user.id, session_factory=get_session_factory())
    return success({"stats": stats})


@bp.get("/analytics")
def session_analytics():
    analytics = session_service.session_analytics(
        g.current_user.id,
        period=request.args.get("period", "all"),
        session_factory=get_session_factory(),
    )
    return success(analytics)


@bp.put("/<session_id>")
def update_session(session_id: str):
    record = _owned_session(session_id)
    form = parse_form(SessionNoteForm)
    record = session_service.update_session(
        record,
        experience=form.experience,
        tag=form.tag,
        set_tag=form.has_tag,
        session_factory=get_session_factory(),
    )
    return success({"session": record.summary()}, message="Session updated successfully")


@bp.put("/<session_id>/stop")
def stop_session(session_id: str):
    record = _owned_session(session_id)
    form = parse_form(SessionNoteForm)
    record = session_service.stop_session(
        record,
        experience=form.experience,
        tag=form.tag,
        set_tag=form.has_tag,
        session_factory=get_session_factory(),
    )
    return success({"session": record.summary()}, message="Session stopped successfully")


@bp.delete("/<session_id>")
def delete_session(session_id: str):
    record = _owned_session(session_id)
    session_service.delete_session(record, session_factory=get_session_factory())
    return success(message="Session deleted successfully")
