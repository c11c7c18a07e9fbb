"""Finance form definitions."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ...models.finance import TransactionType
from ...timeutils import parse_datetime


def _validate_amount(value: float) -> float:
    if value <= 0:
        raise ValueError("Amount must be greater than 0")
    if round(value, 2) != value:
        raise ValueError("Amount can have at most 2 decimal places")
    return value


def _coerce_date(value: Any) -> Any:
    if value is None or value == "":
        return None
    return parse_datetime(value)


class TransactionForm(BaseModel):
    """Payload for recording an income or expense."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    type: TransactionType
    amount: float = Field(allow_inf_nan=False)
    category: str = Field(min_length=1)
    custom_category: Optional[str] = Field(default=None, alias="customCategory", max_length=50)
    notes: str = Field(default="", max_length=500)
    date: Optional[datetime] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, value: float) -> float:
        return _validate_amount(value)

    @field_validator("notes", mode="before")
    @classmethod
    def default_notes(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        return _coerce_date(value)


class TransactionUpdateForm(BaseModel):
    """Partial update; the transaction type is fixed once recorded."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    amount: Optional[float] = Field(default=None, allow_inf_nan=False)
    category: Optional[str] = Field(default=None, min_length=1)
    custom_category: Optional[str] = Field(default=None, alias="customCategory", max_length=50)
    notes: Optional[str] = Field(default=None, max_length=500)
    date: Optional[datetime] = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, value: Optional[float]) -> Optional[float]:
        return _validate_amount(value) if value is not None else None

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        return _coerce_date(value)

    @model_validator(mode="after")
    def reject_nulls(self) -> "TransactionUpdateForm":
        for field in ("amount", "category", "date"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


__all__ = ["TransactionForm", "TransactionUpdateForm"]
