"""Session form definitions."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ...models.session import EXPERIENCE_MAX_LENGTH, TAG_MAX_LENGTH


class SessionNoteForm(BaseModel):
    """Reflection note and tag, used when stopping or editing a session.

    ``tag`` is only touched when the key is present, so ``null`` clears it.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    experience: Optional[str] = Field(default=None, max_length=EXPERIENCE_MAX_LENGTH)
    tag: Optional[str] = Field(default=None, max_length=TAG_MAX_LENGTH)

    @property
    def has_tag(self) -> bool:
        return "tag" in self.model_fields_set


__all__ = ["SessionNoteForm"]
