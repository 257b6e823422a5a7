from __future__ import annotations

import time
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from quicksell_admin.core.db import execute, ping
from quicksell_admin.core.errors import ValidationError
from quicksell_admin.models.activity import AdminActivityLog
from quicksell_admin.models.listing import Listing
from quicksell_admin.models.marketplace import MarketplaceAccount
from quicksell_admin.models.user import User
from quicksell_admin.services.access import ensure_admin
from quicksell_admin.services.query_builder import (
    PageRequest,
    build_filters,
    count_query,
    fetch_page,
    normalize_text,
)

PROCESS_STARTED_AT = time.monotonic()

MAX_GROWTH_DAYS = 365


def format_uptime(seconds: float) -> str:
    seconds = max(0, int(seconds))
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}h {minutes}m"


def _as_date(value) -> date:
    # PostgreSQL hands back a date, SQLite a "YYYY-MM-DD" string
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


async def system_health(db: AsyncSession, *, caller_id: int) -> dict:
    await ensure_admin(db, caller_id)

    connected = await ping(db)

    users = int((await execute(db, select(func.count(User.id)))).scalar_one() or 0)
    listings = int(
        (await execute(db, select(func.count(Listing.id)).where(Listing.deleted_at.is_(None)))).scalar_one() or 0
    )
    accounts = int((await execute(db, select(func.count(MarketplaceAccount.id)))).scalar_one() or 0)

    return {
        "database": {"status": "healthy" if connected else "unhealthy", "connected": connected},
        "tables": {"users": users, "listings": listings, "marketplace_accounts": accounts},
        "uptime": format_uptime(time.monotonic() - PROCESS_STARTED_AT),
    }


async def _daily_counts(db: AsyncSession, created_col, cutoff: datetime, *extra_filters) -> list[dict]:
    day = func.date(created_col)
    stmt = (
        select(day.label("day"), func.count().label("count"))
        .where(created_col >= cutoff, *extra_filters)
        .group_by(day)
        .order_by(day)
    )
    res = await execute(db, stmt)
    return [{"date": _as_date(r.day), "count": int(r.count or 0)} for r in res.all() if r.day is not None]


async def growth_series(db: AsyncSession, *, caller_id: int, days: int = 7) -> dict:
    """Per-day signups and new (non-deleted) listings over the last `days` days."""
    await ensure_admin(db, caller_id)

    try:
        days = int(days)
    except (TypeError, ValueError):
        raise ValidationError("days must be an integer")
    if days < 1 or days > MAX_GROWTH_DAYS:
        raise ValidationError(f"days must be between 1 and {MAX_GROWTH_DAYS}")

    cutoff = datetime.now(timezone.utc) - timedelta(days=days)

    return {
        "days": days,
        "user_growth": await _daily_counts(db, User.created_at, cutoff),
        "listing_growth": await _daily_counts(db, Listing.created_at, cutoff, Listing.deleted_at.is_(None)),
    }


async def list_activity(
    db: AsyncSession,
    *,
    caller_id: int,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    action: Optional[str] = None,
) -> dict:
    await ensure_admin(db, caller_id)

    req = PageRequest.build(page, limit)
    action = normalize_text(action)
    filters = build_filters((AdminActivityLog.action == action) if action is not None else None)

    stmt = (
        select(
            AdminActivityLog.id,
            AdminActivityLog.admin_id,
            AdminActivityLog.action,
            AdminActivityLog.target_type,
            AdminActivityLog.target_id,
            AdminActivityLog.details,
            AdminActivityLog.ip_address,
            AdminActivityLog.created_at,
            User.username,
            User.email,
        )
        .select_from(AdminActivityLog)
        .outerjoin(User, User.id == AdminActivityLog.admin_id)
        .where(*filters)
        .order_by(AdminActivityLog.created_at.desc(), AdminActivityLog.id.desc())
    )

    rows, pagination = await fetch_page(db, stmt, count_query(AdminActivityLog, filters), req)

    items = [
        {
            "id": int(r.id),
            "admin_id": int(r.admin_id) if r.admin_id is not None else None,
            "action": r.action,
            "target_type": r.target_type,
            "target_id": r.target_id,
            "details": r.details,
            "ip_address": r.ip_address,
            "created_at": r.created_at,
            "username": r.username,
            "email": r.email,
        }
        for r in rows
    ]
    return {"items": items, "pagination": pagination}
