"""Goal form definitions."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...models.goal import GoalType
from ...timeutils import parse_datetime


class GoalForm(BaseModel):
    """Payload for creating a goal."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    type: GoalType
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=500)
    target_value: int = Field(alias="targetValue", ge=1)
    unit: str = Field(min_length=1, max_length=50)
    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def coerce_dates(cls, value: Any) -> Any:
        return parse_datetime(value)


class ProgressForm(BaseModel):
    """``increment`` may be negative; integer strings such as ``"5"`` are accepted."""

    increment: int

    @field_validator("increment", mode="before")
    @classmethod
    def parse_increment(cls, value: Any) -> Any:
        # bools are ints in Python; ``true`` must not count as 1
        if isinstance(value, bool):
            raise ValueError("Increment must be an integer")
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError as exc:
                raise ValueError("Increment must be an integer") from exc
        return value


class VisionImageForm(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, validate_default=True)

    image_url: str = Field(default="", alias="imageUrl", max_length=2048)

    @field_validator("image_url")
    @classmethod
    def require_url(cls, value: str) -> str:
        if not value:
            raise ValueError("Image URL is required")
        return value


__all__ = ["GoalForm", "ProgressForm", "VisionImageForm"]
