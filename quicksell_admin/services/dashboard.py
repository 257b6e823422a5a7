from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import desc, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from quicksell_admin.core.config import settings
from quicksell_admin.core.db import commit, execute
from quicksell_admin.core.errors import AdminError
from quicksell_admin.models.activity import AdminActivityLog
from quicksell_admin.models.listing import STATUS_ALIASES, Listing, ListingStatus
from quicksell_admin.models.marketplace import EbayListing, MarketplaceAccount
from quicksell_admin.models.user import SubscriptionTier, User
from quicksell_admin.services.access import ensure_admin

logger = logging.getLogger(__name__)

VIEW_DASHBOARD_ACTION = "view_dashboard"

_CENTS = Decimal("0.01")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _not_deleted():
    return Listing.deleted_at.is_(None)


async def _scalar_int(db: AsyncSession, stmt) -> int:
    return int((await execute(db, stmt)).scalar_one() or 0)


def listing_counts_subquery():
    """Per-user count of non-deleted listings (user_id, listing_count)."""
    return (
        select(Listing.user_id.label("user_id"), func.count(Listing.id).label("listing_count"))
        .where(_not_deleted())
        .group_by(Listing.user_id)
        .subquery("listing_counts")
    )


def canonical_status(raw: Optional[str]) -> Optional[ListingStatus]:
    if raw is None:
        return None
    if raw in STATUS_ALIASES:
        return STATUS_ALIASES[raw]
    try:
        return ListingStatus(raw)
    except ValueError:
        return None


def estimate_revenue(
    premium_count: int,
    premium_plus_count: int,
    *,
    premium_price: Optional[Decimal] = None,
    premium_plus_price: Optional[Decimal] = None,
) -> dict:
    """
    Monthly/annual revenue *estimate* from tier head-counts and list prices.
    Not derived from payments; prices come from settings.
    """
    premium_price = settings.PRICE_PREMIUM_MONTHLY if premium_price is None else Decimal(premium_price)
    premium_plus_price = (
        settings.PRICE_PREMIUM_PLUS_MONTHLY if premium_plus_price is None else Decimal(premium_plus_price)
    )

    monthly = Decimal(int(premium_count)) * premium_price + Decimal(int(premium_plus_count)) * premium_plus_price
    annual = monthly * 12

    return {
        "is_estimate": True,
        "monthly_revenue": monthly.quantize(_CENTS, rounding=ROUND_HALF_UP),
        "annual_revenue": annual.quantize(_CENTS, rounding=ROUND_HALF_UP),
        "premium_users": int(premium_count),
        "premium_plus_users": int(premium_plus_count),
    }


async def listings_by_status(db: AsyncSession) -> dict[str, int]:
    """
    Non-deleted listings bucketed by canonical status. Every bucket is present.
    Legacy values are folded into their canonical bucket.
    """
    buckets = {s.value: 0 for s in ListingStatus}

    res = await execute(
        db,
        select(Listing.status, func.count(Listing.id)).where(_not_deleted()).group_by(Listing.status),
    )
    for raw, count in res.all():
        status = canonical_status(raw)
        if status is None:
            logger.warning("Listing status %r is outside the known vocabulary; not bucketed", raw)
            continue
        buckets[status.value] += int(count or 0)

    return buckets


async def users_by_tier(db: AsyncSession) -> dict[str, int]:
    res = await execute(
        db,
        select(User.subscription_tier, func.count(User.id)).group_by(User.subscription_tier),
    )
    return {str(tier): int(count or 0) for tier, count in res.all() if tier is not None}


async def top_users_by_listings(db: AsyncSession, *, limit: Optional[int] = None) -> list[dict]:
    limit = settings.TOP_USERS_LIMIT if limit is None else int(limit)
    lc = listing_counts_subquery()
    listing_count = func.coalesce(lc.c.listing_count, 0).label("listing_count")

    stmt = (
        select(User.id, User.username, User.email, User.subscription_tier, listing_count)
        .select_from(User)
        .outerjoin(lc, lc.c.user_id == User.id)
        .order_by(desc("listing_count"), User.id.asc())
        .limit(limit)
    )

    res = await execute(db, stmt)
    items = []
    for row in res.all():
        items.append(
            {
                "id": int(row.id),
                "username": row.username or "",
                "email": row.email,
                "subscription_tier": row.subscription_tier or "",
                "listing_count": int(row.listing_count or 0),
            }
        )
    return items


async def dashboard_overview(db: AsyncSession, *, caller_id: int) -> dict:
    await ensure_admin(db, caller_id)

    total_users = await _scalar_int(db, select(func.count(User.id)))
    total_listings = await _scalar_int(db, select(func.count(Listing.id)).where(_not_deleted()))
    total_points = await _scalar_int(db, select(func.coalesce(func.sum(User.points), 0)))
    by_status = await listings_by_status(db)

    avg = round(total_listings / total_users, 2) if total_users > 0 else 0.0

    return {
        "total_users": total_users,
        "total_listings": total_listings,
        "listings_by_status": by_status,
        "total_points": total_points,
        "avg_listings_per_user": avg,
    }


async def _record_activity(
    db: AsyncSession,
    *,
    admin_id: int,
    action: str,
    details: dict,
    ip_address: Optional[str],
) -> bool:
    """Best-effort audit append. Failure is logged and swallowed."""
    try:
        await execute(
            db,
            insert(AdminActivityLog).values(
                admin_id=int(admin_id),
                action=action,
                details=details,
                ip_address=ip_address,
            ),
        )
        await commit(db)
        return True
    except AdminError:
        try:
            await db.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback after failed audit write also failed")
        logger.warning("Audit write %r for admin_id=%s failed; continuing", action, admin_id)
        return False


async def dashboard_metrics(
    db: AsyncSession,
    *,
    caller_id: int,
    ip_address: Optional[str] = None,
) -> dict:
    """
    Full admin metrics report: overview counts, tier breakdown, status
    breakdown, revenue estimate and top users.

    All reads complete before anything is returned; a failed read fails the
    whole report. The view_dashboard audit row is written afterwards and never
    fails the request.
    """
    admin = await ensure_admin(db, caller_id)

    now = _utc_now()
    recent_cutoff = now - timedelta(days=settings.RECENT_USERS_DAYS)
    active_cutoff = now - timedelta(days=settings.ACTIVE_USERS_DAYS)

    total_users = await _scalar_int(db, select(func.count(User.id)))
    total_listings = await _scalar_int(db, select(func.count(Listing.id)).where(_not_deleted()))
    connected_accounts = await _scalar_int(
        db, select(func.count(MarketplaceAccount.id)).where(MarketplaceAccount.is_active.is_(True))
    )
    ebay_listings = await _scalar_int(db, select(func.count(EbayListing.id)))
    recent_users = await _scalar_int(db, select(func.count(User.id)).where(User.created_at > recent_cutoff))
    active_users = await _scalar_int(
        db,
        select(func.count(func.distinct(Listing.user_id))).where(
            _not_deleted(),
            Listing.user_id.isnot(None),
            Listing.created_at > active_cutoff,
        ),
    )

    tiers = await users_by_tier(db)
    by_status = await listings_by_status(db)
    top_users = await top_users_by_listings(db)

    revenue = estimate_revenue(
        tiers.get(SubscriptionTier.premium.value, 0),
        tiers.get(SubscriptionTier.premium_plus.value, 0),
    )

    metrics = {
        "overview": {
            "total_users": total_users,
            "total_listings": total_listings,
            "connected_accounts": connected_accounts,
            "ebay_listings": ebay_listings,
            "recent_users": recent_users,
            "active_users": active_users,
        },
        "subscriptions": tiers,
        "listings": by_status,
        "revenue": revenue,
        "top_users": top_users,
    }

    await _record_activity(
        db,
        admin_id=int(admin.id),
        action=VIEW_DASHBOARD_ACTION,
        details={"timestamp": now.isoformat()},
        ip_address=ip_address,
    )

    return metrics
