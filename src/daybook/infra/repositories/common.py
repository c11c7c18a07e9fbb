"""Pagination and sorting helpers shared by list queries."""

from __future__ import annotations

from dataclasses import dataclass
from math import ceil
from typing import Any, Mapping

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
# Keeps OFFSET inside a 64-bit integer on every backend.
MAX_PAGE = 1_000_000


@dataclass(frozen=True, slots=True)
class PageRequest:
    """Sanitized page/limit pair from query parameters."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "PageRequest":
        page = min(_positive_int(args.get("page"), 1), MAX_PAGE)
        limit = min(_positive_int(args.get("limit"), DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)
        return cls(page=page, limit=limit)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True, slots=True)
class Pagination:
    """Pagination metadata for list responses."""

    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        if self.total == 0:
            return 0
        return ceil(self.total / self.limit)

    def to_dict(self) -> dict[str, int]:
        return {"page": self.page, "limit": self.limit, "total": self.total, "pages": self.pages}


def _positive_int(raw: Any, default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def order_by_clause(sort: str | None, columns: Mapping[str, Any], default: str):
    """Translate ``"-field"`` / ``"field"`` into an ORDER BY expression.

    Unknown fields fall back to ``default``.
    """

    def _resolve(key: str):
        descending = key.startswith("-")
        name = key.lstrip("-+").strip()
        column = columns.get(name)
        if column is None:
            return None
        return column.desc() if descending else column.asc()

    clause = _resolve(sort.strip()) if sort and sort.strip() else None
    if clause is None:
        clause = _resolve(default)
    return clause
