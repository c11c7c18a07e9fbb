"""Income/expense bookkeeping and read-side aggregation."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from ..errors import ValidationFailed
from ..infra.database import SessionFactory
from ..infra.repositories import SQLModelFinanceRepository
from ..infra.repositories.common import PageRequest, Pagination
from ..logging_config import get_logger
from ..models.finance import (
    EXPENSE_CATEGORIES,
    INCOME_SOURCES,
    OTHER_CATEGORY,
    FinanceTransaction,
    TransactionType,
    categories_for,
)
from ..timeutils import month_bounds, months_ago, utcnow

logger = get_logger(__name__)

DEFAULT_TREND_MONTHS = 6
MAX_TREND_MONTHS = 120


def resolve_category(
    txn_type: str, category: str, custom_category: Optional[str]
) -> Optional[str]:
    """Check ``category`` against the type's enum and return the custom label to store.

    The label is required for "Other" and dropped for every other category.
    """

    valid = categories_for(txn_type)
    if category not in valid:
        raise ValidationFailed(
            f"Invalid category for {txn_type}. Must be one of: {', '.join(valid)}"
        )
    if category != OTHER_CATEGORY:
        return None
    label = (custom_category or "").strip()
    if not label:
        raise ValidationFailed('Please specify a name for "Other" in customCategory')
    return label


def get_transaction(
    transaction_id: int, *, session_factory: SessionFactory
) -> Optional[FinanceTransaction]:
    return SQLModelFinanceRepository(session_factory).get_by_id(transaction_id)


def create_transaction(
    user_id: int,
    *,
    txn_type: str,
    amount: float,
    category: str,
    custom_category: Optional[str] = None,
    notes: str = "",
    date: Optional[datetime] = None,
    session_factory: SessionFactory,
) -> FinanceTransaction:
    label = resolve_category(txn_type, category, custom_category)
    transaction = FinanceTransaction(
        user_id=user_id,
        type=txn_type,
        amount=amount,
        category=category,
        custom_category=label,
        notes=(notes or "").strip(),
        date=date or utcnow(),
    )
    transaction = SQLModelFinanceRepository(session_factory).create(transaction)
    logger.info(
        "Transaction recorded",
        extra={"user_id": user_id, "transaction_id": transaction.id, "type": txn_type},
    )
    return transaction


def update_transaction(
    transaction: FinanceTransaction,
    *,
    changes: dict[str, Any],
    session_factory: SessionFactory,
) -> FinanceTransaction:
    """Apply a partial update; the type of a transaction never changes."""

    if "amount" in changes:
        transaction.amount = changes["amount"]
    if "category" in changes or "custom_category" in changes:
        category = changes.get("category", transaction.category)
        custom = changes.get("custom_category", transaction.custom_category)
        transaction.custom_category = resolve_category(transaction.type, category, custom)
        transaction.category = category
    if "notes" in changes:
        transaction.notes = (changes["notes"] or "").strip()
    if "date" in changes:
        transaction.date = changes["date"]
    transaction.updated_at = utcnow()
    return SQLModelFinanceRepository(session_factory).update(transaction)


def delete_transaction(transaction: FinanceTransaction, *, session_factory: SessionFactory) -> None:
    SQLModelFinanceRepository(session_factory).delete(transaction.id)


def list_transactions(
    user_id: int,
    *,
    page: PageRequest,
    txn_type: Optional[str] = None,
    category: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    sort: Optional[str] = None,
    session_factory: SessionFactory,
) -> tuple[list[FinanceTransaction], Pagination]:
    rows, total = SQLModelFinanceRepository(session_factory).search(
        user_id=user_id,
        page=page,
        txn_type=txn_type,
        category=category,
        start_date=start_date,
        end_date=end_date,
        sort=sort,
    )
    return rows, Pagination(page=page.page, limit=page.limit, total=total)


def default_period(now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """The current calendar month, used when no range is given."""
    return month_bounds(now or utcnow())


def summarize_totals(totals: dict[str, float]) -> dict[str, float]:
    income = totals.get(TransactionType.INCOME.value, 0.0)
    expenses = totals.get(TransactionType.EXPENSE.value, 0.0)
    savings = income - expenses
    return {
        "income": income,
        "expenses": expenses,
        "savings": savings,
        "savingsRate": round(savings / income * 100, 2) if income > 0 else 0,
    }


def financial_summary(
    user_id: int, *, start_date: datetime, end_date: datetime, session_factory: SessionFactory
) -> dict[str, float]:
    totals = SQLModelFinanceRepository(session_factory).totals_by_type(
        user_id=user_id, start_date=start_date, end_date=end_date
    )
    return summarize_totals(totals)


def build_breakdown(rows: Iterable[tuple[str, float, int]]) -> list[dict[str, Any]]:
    """Attach percentage shares to ``(label, amount, count)`` groups."""

    groups = list(rows)
    grand_total = sum(amount for _, amount, _ in groups)
    return [
        {
            "category": label or OTHER_CATEGORY,
            "amount": amount,
            "count": count,
            "percentage": round(amount / grand_total * 100, 2) if grand_total > 0 else 0,
        }
        for label, amount, count in groups
    ]


def category_breakdown(
    user_id: int,
    *,
    txn_type: str,
    start_date: datetime,
    end_date: datetime,
    session_factory: SessionFactory,
) -> list[dict[str, Any]]:
    rows = SQLModelFinanceRepository(session_factory).grouped_by_category(
        user_id=user_id, txn_type=txn_type, start_date=start_date, end_date=end_date
    )
    return build_breakdown(rows)


def build_trends(rows: Iterable[tuple[int, int, str, float]]) -> list[dict[str, Any]]:
    """Pivot ``(year, month, type, total)`` rows into one point per month, ascending."""

    months: dict[tuple[int, int], dict[str, float]] = {}
    for year, month, txn_type, total in rows:
        bucket = months.setdefault((year, month), {"income": 0.0, "expenses": 0.0})
        if txn_type == TransactionType.INCOME.value:
            bucket["income"] += total
        elif txn_type == TransactionType.EXPENSE.value:
            bucket["expenses"] += total
    return [
        {
            "year": year,
            "month": month,
            "income": bucket["income"],
            "expenses": bucket["expenses"],
            "savings": bucket["income"] - bucket["expenses"],
        }
        for (year, month), bucket in sorted(months.items())
    ]


def monthly_trends(
    user_id: int,
    *,
    months: int = DEFAULT_TREND_MONTHS,
    session_factory: SessionFactory,
    now: Optional[datetime] = None,
) -> list[dict[str, Any]]:
    since = months_ago(now or utcnow(), months)
    rows = SQLModelFinanceRepository(session_factory).monthly_totals(user_id=user_id, since=since)
    return build_trends(rows)


def financial_stats(
    user_id: int,
    *,
    months: int = DEFAULT_TREND_MONTHS,
    session_factory: SessionFactory,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Trends, this month's summary and breakdowns, and monthly averages."""

    moment = now or utcnow()
    trends = monthly_trends(user_id, months=months, session_factory=session_factory, now=moment)
    start, end = month_bounds(moment)
    period = {"start_date": start, "end_date": end, "session_factory": session_factory}

    count = len(trends)
    average_income = sum(point["income"] for point in trends) / count if count else 0.0
    average_expenses = sum(point["expenses"] for point in trends) / count if count else 0.0

    return {
        "trends": trends,
        "currentMonth": {
            "summary": financial_summary(user_id, **period),
            "expenseBreakdown": category_breakdown(
                user_id, txn_type=TransactionType.EXPENSE.value, **period
            ),
            "incomeBreakdown": category_breakdown(
                user_id, txn_type=TransactionType.INCOME.value, **period
            ),
        },
        "averages": {
            "monthlyIncome": round(average_income),
            "monthlyExpenses": round(average_expenses),
            "monthlySavings": round(average_income - average_expenses),
        },
        "metadata": {
            "months": months,
            "totalTransactions": SQLModelFinanceRepository(session_factory).count_since(
                user_id=user_id, since=months_ago(moment, months)
            ),
            "categories": {
                "income": list(INCOME_SOURCES),
                "expenses": list(EXPENSE_CATEGORIES),
            },
        },
    }


__all__ = [
    "build_breakdown",
    "build_trends",
    "category_breakdown",
    "create_transaction",
    "default_period",
    "delete_transaction",
    "financial_stats",
    "financial_summary",
    "get_transaction",
    "list_transactions",
    "monthly_trends",
    "resolve_category",
    "summarize_totals",
    "update_transaction",
]
