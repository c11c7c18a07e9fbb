"""Finance routes."""

from __future__ import annotations

from functools import partial

from flask import g, request

from ...extensions import get_session_factory
from ...models.finance import TransactionType
from ...security import load_owned
from ...services import finance as finance_service
from ...timeutils import isoformat
from ..common import page_request, parse_form, query_datetime, query_int, success
from . import bp
from .forms import TransactionForm, TransactionUpdateForm


def _owned_transaction(transaction_id: str):
    loader = partial(finance_service.get_transaction, session_factory=get_session_factory())
    return load_owned(loader, transaction_id, user_id=g.current_user.id, label="Transaction")


def _requested_period():
    """``startDate``/``endDate`` query range, defaulting to the current month."""

    default_start, default_end = finance_service.default_period()
    start = query_datetime("startDate") or default_start
    end = query_datetime("endDate", end_of_day=True) or default_end
    return start, end


def _period_payload(start, end) -> dict:
    return {"startDate": isoformat(start), "endDate": isoformat(end)}


@bp.post("/")
def add_transaction():
    form = parse_form(TransactionForm)
    transaction = finance_service.create_transaction(
        g.current_user.id,
        txn_type=form.type.value,
        amount=form.amount,
        category=form.category,
        custom_category=form.custom_category,
        notes=form.notes,
        date=form.date,
        session_factory=get_session_factory(),
    )
    label = "Income" if form.type is TransactionType.INCOME else "Expense"
    return success(
        {"transaction": transaction.summary()},
        message=f"{label} added successfully",
        status=201,
    )


@bp.get("/")
def list_transactions():
    txn_type = request.args.get("type") or None
    if txn_type is not None and txn_type not in {item.value for item in TransactionType}:
        txn_type = None
    rows, pagination = finance_service.list_transactions(
        g.current_user.id,
        page=page_request(),
        txn_type=txn_type,
        category=request.args.get("category") or None,
        start_date=query_datetime("startDate"),
        end_date=query_datetime("endDate", end_of_day=True),
        sort=request.args.get("sort"),
        session_factory=get_session_factory(),
    )
    return success(
        {"transactions": [row.summary() for row in rows], "pagination": pagination.to_dict()}
    )


@bp.get("/summary")
def financial_summary():
    start, end = _requested_period()
    summary = finance_service.financial_summary(
        g.current_user.id, start_date=start, end_date=end, session_factory=get_session_factory()
    )
    return success({"summary": summary, "period": _period_payload(start, end)})


def _breakdown(txn_type: TransactionType):
    start, end = _requested_period()
    breakdown = finance_service.category_breakdown(
        g.current_user.id,
        txn_type=txn_type.value,
        start_date=start,
        end_date=end,
        session_factory=get_session_factory(),
    )
    return success({"breakdown": breakdown, "period": _period_payload(start, end)})


@bp.get("/breakdown/expenses")
def expense_breakdown():
    return _breakdown(TransactionType.EXPENSE)


@bp.get("/breakdown/income")
def income_breakdown():
    return _breakdown(TransactionType.INCOME)


@bp.get("/trends")
def monthly_trends():
    months = query_int(
        "months", finance_service.DEFAULT_TREND_MONTHS, maximum=finance_service.MAX_TREND_MONTHS
    )
    trends = finance_service.monthly_trends(
        g.current_user.id, months=months, session_factory=get_session_factory()
    )
    return success({"trends": trends, "months": months})


@bp.get("/stats")
def financial_stats():
    months = query_int(
        "months", finance_service.DEFAULT_TREND_MONTHS, maximum=finance_service.MAX_TREND_MONTHS
    )
    stats = finance_service.financial_stats(
        g.current_user.id, months=months, session_factory=get_session_factory()
    )
    return success(stats)


@bp.put("/<transaction_id>")
def update_transaction(transaction_id: str):
    transaction = _owned_transaction(transaction_id)
    form = parse_form(TransactionUpdateForm)
    transaction = finance_service.update_transaction(
        transaction, changes=form.changes(), session_factory=get_session_factory()
    )
    return success(
        {"transaction": transaction.summary()}, message="Transaction updated successfully"
    )


@bp.delete("/<transaction_id>")
def delete_transaction(transaction_id: str):
    transaction = _owned_transaction(transaction_id)
    finance_service.delete_transaction(transaction, session_factory=get_session_factory())
    return success(message="Transaction deleted successfully")
