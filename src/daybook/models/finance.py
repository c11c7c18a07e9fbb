"""SQLModel definitions for income and expense transactions."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from ..timeutils import isoformat, utcnow

INCOME_SOURCES: tuple[str, ...] = ("Salary", "Freelance", "Investment", "Business", "Other")

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Rent",
    "Food",
    "Transport",
    "Entertainment",
    "Shopping",
    "Bills",
    "Healthcare",
    "Education",
    "Other",
)

OTHER_CATEGORY = "Other"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


def categories_for(txn_type: str) -> tuple[str, ...]:
    """Return the category enum matching a transaction type."""

    if txn_type == TransactionType.INCOME.value:
        return INCOME_SOURCES
    if txn_type == TransactionType.EXPENSE.value:
        return EXPENSE_CATEGORIES
    return ()


class FinanceTransaction(SQLModel, table=True):
    """A single income or expense entry."""

    __tablename__: ClassVar[str] = "finance_transaction"
    __table_args__ = (
        Index("ix_finance_user_type_date", "user_id", "type", "date"),
        Index("ix_finance_user_date", "user_id", "date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    type: str = Field(nullable=False, max_length=16)
    amount: float = Field(nullable=False, description="Always positive; type carries the sign")
    category: str = Field(nullable=False, max_length=32, index=True)
    custom_category: Optional[str] = Field(default=None, max_length=50)
    notes: str = Field(default="", max_length=500)
    date: datetime = Field(default_factory=utcnow, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "amount": self.amount,
            "category": self.category,
            "customCategory": self.custom_category,
            "notes": self.notes,
            "date": isoformat(self.date),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
