from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quicksell_admin.core.db import commit, execute
from quicksell_admin.core.errors import AdminError, NotFound, ValidationError
from quicksell_admin.models.listing import Listing
from quicksell_admin.models.marketplace import MarketplaceAccount
from quicksell_admin.models.user import SubscriptionTier, User
from quicksell_admin.services.access import ensure_admin
from quicksell_admin.services.dashboard import listing_counts_subquery
from quicksell_admin.services.query_builder import (
    PageRequest,
    build_filters,
    count_query,
    fetch_page,
    normalize_text,
    text_search,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("username", "email", "subscription_tier", "points", "is_admin")


def _connected_accounts_subquery():
    return (
        select(
            MarketplaceAccount.user_id.label("user_id"),
            func.count(MarketplaceAccount.id).label("connected_accounts"),
        )
        .where(MarketplaceAccount.is_active.is_(True))
        .group_by(MarketplaceAccount.user_id)
        .subquery("connected_accounts")
    )


def _user_rows_stmt():
    """
    User projection with listing / connected-account counts.
    Counts are pre-aggregated per user so the two outer joins don't multiply.
    """
    lc = listing_counts_subquery()
    ca = _connected_accounts_subquery()

    return (
        select(
            User.id,
            User.username,
            User.email,
            User.subscription_tier,
            User.points,
            User.current_level,
            User.is_admin,
            User.created_at,
            User.updated_at,
            func.coalesce(lc.c.listing_count, 0).label("listing_count"),
            func.coalesce(ca.c.connected_accounts, 0).label("connected_accounts"),
        )
        .select_from(User)
        .outerjoin(lc, lc.c.user_id == User.id)
        .outerjoin(ca, ca.c.user_id == User.id)
    )


def _user_row_to_dict(row) -> dict:
    return {
        "id": int(row.id),
        "username": row.username,
        "email": row.email,
        "subscription_tier": row.subscription_tier,
        "points": int(row.points or 0),
        "current_level": int(row.current_level or 0),
        "is_admin": bool(row.is_admin),
        "created_at": row.created_at,
        "updated_at": row.updated_at,
        "listing_count": int(row.listing_count or 0),
        "connected_accounts": int(row.connected_accounts or 0),
    }


def parse_tier(tier: Optional[str]) -> Optional[SubscriptionTier]:
    tier = normalize_text(tier)
    if tier is None:
        return None
    try:
        return SubscriptionTier(tier)
    except ValueError:
        allowed = ", ".join(t.value for t in SubscriptionTier)
        raise ValidationError(f"Unknown subscription tier {tier!r} (expected one of: {allowed})")


def user_filters(*, search: Optional[str], tier: Optional[SubscriptionTier]) -> list:
    return build_filters(
        text_search([User.username, User.email], search),
        (User.subscription_tier == tier.value) if tier is not None else None,
    )


async def list_users(
    db: AsyncSession,
    *,
    caller_id: int,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    search: Optional[str] = None,
    tier: Optional[str] = None,
) -> dict:
    await ensure_admin(db, caller_id)

    req = PageRequest.build(page, limit)
    filters = user_filters(search=search, tier=parse_tier(tier))

    stmt = _user_rows_stmt().where(*filters).order_by(User.created_at.desc(), User.id.desc())
    rows, pagination = await fetch_page(db, stmt, count_query(User, filters), req)

    return {"items": [_user_row_to_dict(r) for r in rows], "pagination": pagination}


async def get_user(db: AsyncSession, *, caller_id: int, user_id: int) -> dict:
    await ensure_admin(db, caller_id)

    res = await execute(db, _user_rows_stmt().where(User.id == int(user_id)))
    row = res.first()
    if row is None:
        raise NotFound("User not found")
    return _user_row_to_dict(row)


async def update_user(
    db: AsyncSession,
    *,
    caller_id: int,
    user_id: int,
    changes: dict[str, Any],
) -> dict:
    """
    Apply every provided field in one UPDATE and touch updated_at.
    Unknown keys are rejected; None values are ignored.
    """
    await ensure_admin(db, caller_id)

    unknown = sorted(set(changes) - set(UPDATABLE_FIELDS))
    if unknown:
        raise ValidationError(f"Fields not updatable: {unknown}")

    values = {k: v for k, v in changes.items() if v is not None}
    if "subscription_tier" in values:
        values["subscription_tier"] = parse_tier(
            getattr(values["subscription_tier"], "value", values["subscription_tier"])
        ).value
    if "points" in values and int(values["points"]) < 0:
        raise ValidationError("points must be >= 0")

    stmt = (
        update(User)
        .where(User.id == int(user_id))
        .values(**values, updated_at=func.now())
        .returning(
            User.id,
            User.username,
            User.email,
            User.subscription_tier,
            User.points,
            User.is_admin,
            User.updated_at,
        )
        .execution_options(synchronize_session=False)
    )

    try:
        row = (await execute(db, stmt)).first()
        if row is None:
            raise NotFound("User not found")
        await commit(db)
    except AdminError:
        await db.rollback()
        raise

    logger.info("Admin %s updated user %s (fields=%s)", caller_id, user_id, sorted(values))

    return {
        "id": int(row.id),
        "username": row.username,
        "email": row.email,
        "subscription_tier": row.subscription_tier,
        "points": int(row.points or 0),
        "is_admin": bool(row.is_admin),
        "updated_at": row.updated_at,
    }


async def delete_user(db: AsyncSession, *, caller_id: int, user_id: int) -> None:
    """
    Soft-delete the user's listings, then hard-delete the user, as one
    transaction. Nothing is kept if the user does not exist.
    """
    await ensure_admin(db, caller_id)

    try:
        res = await execute(
            db,
            update(Listing)
            .where(Listing.user_id == int(user_id), Listing.deleted_at.is_(None))
            .values(deleted_at=func.now())
            .execution_options(synchronize_session=False),
        )
        soft_deleted = res.rowcount or 0

        res = await execute(
            db,
            delete(User)
            .where(User.id == int(user_id))
            .returning(User.id)
            .execution_options(synchronize_session=False),
        )
        if res.scalar_one_or_none() is None:
            raise NotFound("User not found")

        await commit(db)
    except AdminError:
        await db.rollback()
        raise

    logger.info("Admin %s deleted user %s (%s listings soft-deleted)", caller_id, user_id, soft_deleted)
