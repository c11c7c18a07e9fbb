"""Habit and daily task form definitions."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...timeutils import parse_datetime


class HabitForm(BaseModel):
    """Form model for creating a habit."""

    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True)

    name: str = Field(default="", max_length=100)
    icon: Optional[str] = Field(default=None, max_length=10)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        """Ensure the habit name is present when validating submissions."""

        if not value:
            raise ValueError("Habit name is required")
        return value


class DailyTaskForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, validate_default=True)

    title: str = Field(default="", max_length=200)
    description: str = Field(default="", max_length=500)
    date: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        if not value:
            raise ValueError("Task title is required")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("date", mode="before")
    @classmethod
    def coerce_date(cls, value: Any) -> Any:
        if value is None or value == "":
            return None
        return parse_datetime(value)


__all__ = ["DailyTaskForm", "HabitForm"]
