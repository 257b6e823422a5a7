from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from sqlalchemy import ColumnElement, Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from quicksell_admin.core.config import settings
from quicksell_admin.core.db import execute
from quicksell_admin.core.errors import ValidationError

LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class PageRequest:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def build(cls, page: Optional[int] = None, limit: Optional[int] = None) -> "PageRequest":
        """
        page defaults to 1, limit to DEFAULT_PAGE_LIMIT.
        Anything below 1 is rejected; limit above MAX_PAGE_LIMIT is clamped.
        """
        page = 1 if page is None else page
        limit = settings.DEFAULT_PAGE_LIMIT if limit is None else limit

        try:
            page = int(page)
            limit = int(limit)
        except (TypeError, ValueError):
            raise ValidationError("page and limit must be integers")

        if page < 1:
            raise ValidationError("page must be >= 1")
        if limit < 1:
            raise ValidationError("limit must be >= 1")

        return cls(page=page, limit=min(limit, settings.MAX_PAGE_LIMIT))


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        raise ValueError("limit must be positive")
    return math.ceil(total / limit)


def escape_like(term: str) -> str:
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def normalize_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def text_search(columns: Sequence[Any], term: Optional[str]) -> Optional[ColumnElement[bool]]:
    """
    Case-insensitive substring match across `columns` (OR'ed).
    The term is bound as a parameter; %, _ and \\ in it match literally.
    """
    term = normalize_text(term)
    if term is None:
        return None

    pattern = f"%{escape_like(term)}%"
    return or_(*[col.ilike(pattern, escape=LIKE_ESCAPE) for col in columns])


def build_filters(*predicates: Optional[ColumnElement[bool]]) -> list[ColumnElement[bool]]:
    """Drop the predicates that were not requested."""
    return [p for p in predicates if p is not None]


def count_query(entity, filters: Sequence[ColumnElement[bool]]) -> Select:
    return select(func.count()).select_from(entity).where(*filters)


async def fetch_page(
    db: AsyncSession,
    stmt: Select,
    count_stmt: Select,
    req: PageRequest,
) -> tuple[list[Any], dict]:
    """
    Run the page query (with limit/offset applied here) and its COUNT twin.
    Returns (rows, pagination dict).
    """
    total = int((await execute(db, count_stmt)).scalar_one() or 0)

    res = await execute(db, stmt.limit(req.limit).offset(req.offset))
    rows = list(res.all())

    return rows, {
        "page": req.page,
        "limit": req.limit,
        "total": total,
        "total_pages": total_pages(total, req.limit),
    }
