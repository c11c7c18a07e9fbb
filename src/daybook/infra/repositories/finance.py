"""SQLModel implementation of the finance transaction repository."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import and_, case, extract, func
from sqlmodel import select

from ...models.finance import OTHER_CATEGORY, FinanceTransaction
from ..database import SessionFactory
from .common import PageRequest, order_by_clause

SORTABLE_COLUMNS = {
    "date": FinanceTransaction.date,
    "amount": FinanceTransaction.amount,
    "category": FinanceTransaction.category,
    "type": FinanceTransaction.type,
    "createdAt": FinanceTransaction.created_at,
}
DEFAULT_SORT = "-date"

# "Other" rows group under their custom label when one is present.
_GROUP_LABEL = case(
    (
        and_(
            FinanceTransaction.category == OTHER_CATEGORY,
            FinanceTransaction.custom_category.isnot(None),
            FinanceTransaction.custom_category != "",
        ),
        FinanceTransaction.custom_category,
    ),
    else_=FinanceTransaction.category,
)


class SQLModelFinanceRepository:
    """SQLModel-based finance transaction repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, transaction_id: int) -> Optional[FinanceTransaction]:
        with self.session_factory() as session:
            obj = session.get(FinanceTransaction, transaction_id)
            if obj:
                session.expunge(obj)
            return obj

    def create(self, transaction: FinanceTransaction) -> FinanceTransaction:
        with self.session_factory() as session:
            session.add(transaction)
            session.commit()
            session.refresh(transaction)
            session.expunge(transaction)
            return transaction

    def update(self, transaction: FinanceTransaction) -> FinanceTransaction:
        with self.session_factory() as session:
            session.add(transaction)
            session.commit()
            session.refresh(transaction)
            session.expunge(transaction)
            return transaction

    def delete(self, transaction_id: int) -> None:
        with self.session_factory() as session:
            obj = session.get(FinanceTransaction, transaction_id)
            if obj:
                session.delete(obj)
                session.commit()

    def search(
        self,
        *,
        user_id: int,
        page: PageRequest,
        txn_type: Optional[str] = None,
        category: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        sort: Optional[str] = None,
    ) -> tuple[list[FinanceTransaction], int]:
        """Filtered, sorted page of transactions plus the unpaged total."""
        with self.session_factory() as session:
            conditions = [FinanceTransaction.user_id == user_id]
            if txn_type:
                conditions.append(FinanceTransaction.type == txn_type)
            if category:
                conditions.append(FinanceTransaction.category == category)
            if start_date:
                conditions.append(FinanceTransaction.date >= start_date)
            if end_date:
                conditions.append(FinanceTransaction.date <= end_date)

            total = session.exec(
                select(func.count()).select_from(FinanceTransaction).where(*conditions)
            ).one()
            statement = (
                select(FinanceTransaction)
                .where(*conditions)
                .order_by(order_by_clause(sort, SORTABLE_COLUMNS, DEFAULT_SORT))
                .offset(page.offset)
                .limit(page.limit)
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows, total

    def totals_by_type(
        self, *, user_id: int, start_date: datetime, end_date: datetime
    ) -> dict[str, float]:
        """Sum of amounts per transaction type within ``[start, end]``."""
        with self.session_factory() as session:
            rows = session.exec(
                select(FinanceTransaction.type, func.sum(FinanceTransaction.amount))
                .where(FinanceTransaction.user_id == user_id)
                .where(FinanceTransaction.date >= start_date)
                .where(FinanceTransaction.date <= end_date)
                .group_by(FinanceTransaction.type)
            ).all()
            return {txn_type: float(total or 0) for txn_type, total in rows}

    def grouped_by_category(
        self, *, user_id: int, txn_type: str, start_date: datetime, end_date: datetime
    ) -> list[tuple[str, float, int]]:
        """Return ``(label, total, count)`` rows, largest total first."""
        with self.session_factory() as session:
            total = func.sum(FinanceTransaction.amount).label("total")
            rows = session.exec(
                select(_GROUP_LABEL.label("label"), total, func.count().label("count"))
                .where(FinanceTransaction.user_id == user_id)
                .where(FinanceTransaction.type == txn_type)
                .where(FinanceTransaction.date >= start_date)
                .where(FinanceTransaction.date <= end_date)
                .group_by("label")
                .order_by(total.desc())
            ).all()
            return [(label, float(amount or 0), int(count)) for label, amount, count in rows]

    def monthly_totals(
        self, *, user_id: int, since: datetime
    ) -> list[tuple[int, int, str, float]]:
        """Return ``(year, month, type, total)`` rows for dates at or after ``since``."""
        with self.session_factory() as session:
            year = extract("year", FinanceTransaction.date)
            month = extract("month", FinanceTransaction.date)
            rows = session.exec(
                select(year, month, FinanceTransaction.type, func.sum(FinanceTransaction.amount))
                .where(FinanceTransaction.user_id == user_id)
                .where(FinanceTransaction.date >= since)
                .group_by(year, month, FinanceTransaction.type)
                .order_by(year, month)
            ).all()
            return [
                (int(y), int(m), txn_type, float(total or 0)) for y, m, txn_type, total in rows
            ]

    def count_since(self, *, user_id: int, since: datetime) -> int:
        with self.session_factory() as session:
            return session.exec(
                select(func.count())
                .select_from(FinanceTransaction)
                .where(FinanceTransaction.user_id == user_id)
                .where(FinanceTransaction.date >= since)
            ).one()
