from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quicksell_admin.core.db import commit, execute
from quicksell_admin.core.errors import AdminError, NotFound, ValidationError
from quicksell_admin.models.listing import STATUS_ALIASES, Listing, ListingStatus
from quicksell_admin.models.user import User
from quicksell_admin.services.access import ensure_admin
from quicksell_admin.services.query_builder import (
    PageRequest,
    build_filters,
    count_query,
    fetch_page,
    normalize_text,
    text_search,
)

logger = logging.getLogger(__name__)


def stored_statuses(status: Optional[str]) -> Optional[list[str]]:
    """
    Raw column values that count as `status`: the canonical value plus any
    legacy alias of it. "published" and "active" give the same answer.
    """
    status = normalize_text(status)
    if status is None:
        return None

    canonical = STATUS_ALIASES.get(status)
    if canonical is None:
        try:
            canonical = ListingStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in ListingStatus)
            raise ValidationError(f"Unknown listing status {status!r} (expected one of: {allowed})")

    aliases = sorted(raw for raw, target in STATUS_ALIASES.items() if target is canonical)
    return [canonical.value] + aliases


def listing_filters(
    *,
    search: Optional[str],
    statuses: Optional[list[str]],
    user_id: Optional[int],
) -> list:
    return build_filters(
        Listing.deleted_at.is_(None),
        text_search([Listing.title, Listing.description], search),
        Listing.status.in_(statuses) if statuses else None,
        (Listing.user_id == int(user_id)) if user_id is not None else None,
    )


async def list_listings(
    db: AsyncSession,
    *,
    caller_id: int,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    search: Optional[str] = None,
    status: Optional[str] = None,
    user_id: Optional[int] = None,
) -> dict:
    await ensure_admin(db, caller_id)

    req = PageRequest.build(page, limit)
    filters = listing_filters(search=search, statuses=stored_statuses(status), user_id=user_id)

    stmt = (
        select(
            Listing.id,
            Listing.user_id,
            User.username,
            Listing.title,
            Listing.description,
            Listing.status,
            Listing.price,
            Listing.category,
            Listing.marketplace_listings,
            Listing.created_at,
        )
        .select_from(Listing)
        .outerjoin(User, User.id == Listing.user_id)
        .where(*filters)
        .order_by(Listing.created_at.desc(), Listing.id.desc())
    )

    rows, pagination = await fetch_page(db, stmt, count_query(Listing, filters), req)

    items = []
    for r in rows:
        items.append(
            {
                "id": int(r.id),
                "user_id": int(r.user_id) if r.user_id is not None else None,
                "username": r.username,
                "title": r.title,
                "description": r.description,
                "status": r.status,
                "price": r.price,
                "category": r.category,
                "marketplace_listings": r.marketplace_listings,
                "created_at": r.created_at,
            }
        )

    return {"items": items, "pagination": pagination}


async def delete_listing(db: AsyncSession, *, caller_id: int, listing_id: int) -> None:
    """Soft delete: the row stays, only deleted_at is set."""
    await ensure_admin(db, caller_id)

    stmt = (
        update(Listing)
        .where(Listing.id == int(listing_id), Listing.deleted_at.is_(None))
        .values(deleted_at=func.now(), updated_at=func.now())
        .returning(Listing.id)
        .execution_options(synchronize_session=False)
    )

    try:
        res = await execute(db, stmt)
        if res.scalar_one_or_none() is None:
            raise NotFound("Listing not found")
        await commit(db)
    except AdminError:
        await db.rollback()
        raise

    logger.info("Admin %s soft-deleted listing %s", caller_id, listing_id)
