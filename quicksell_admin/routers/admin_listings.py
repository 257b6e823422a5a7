from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from quicksell_admin.core.db import get_db
from quicksell_admin.core.deps import get_current_user_id
from quicksell_admin.schemas.common import Envelope, PageOut
from quicksell_admin.schemas.listings import AdminListingOut
from quicksell_admin.services.listings import delete_listing, list_listings

router = APIRouter(prefix="/api/v1/admin/listings", tags=["Admin - Listings"])


@router.get("", response_model=Envelope[PageOut[AdminListingOut]])
async def admin_list_listings(
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=255),
    status: Optional[str] = Query(default=None, max_length=32),
    user_id: Optional[int] = Query(default=None),
    db: AsyncSession = Depends(get_db),
    caller_id: int = Depends(get_current_user_id),
) -> Envelope[PageOut[AdminListingOut]]:
    data = await list_listings(
        db,
        caller_id=caller_id,
        page=page,
        limit=limit,
        search=search,
        status=status,
        user_id=user_id,
    )
    return Envelope[PageOut[AdminListingOut]](data=PageOut[AdminListingOut](**data))


@router.delete("/{listing_id}", response_model=Envelope[None])
async def admin_delete_listing(
    listing_id: int,
    db: AsyncSession = Depends(get_db),
    caller_id: int = Depends(get_current_user_id),
) -> Envelope[None]:
    await delete_listing(db, caller_id=caller_id, listing_id=listing_id)
    return Envelope[None](message="Listing deleted successfully")
