from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from quicksell_admin.core.db import get_db
from quicksell_admin.core.deps import get_current_user_id
from quicksell_admin.schemas.common import Envelope, PageOut
from quicksell_admin.schemas.users import AdminUpdateUserRequest, AdminUserOut, AdminUserUpdatedOut
from quicksell_admin.services.users import delete_user, get_user, list_users, update_user

router = APIRouter(prefix="/api/v1/admin/users", tags=["Admin - Users"])


@router.get("", response_model=Envelope[PageOut[AdminUserOut]])
async def admin_list_users(
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    search: Optional[str] = Query(default=None, max_length=255),
    tier: Optional[str] = Query(default=None, max_length=32),
    db: AsyncSession = Depends(get_db),
    caller_id: int = Depends(get_current_user_id),
) -> Envelope[PageOut[AdminUserOut]]:
    data = await list_users(db, caller_id=caller_id, page=page, limit=limit, search=search, tier=tier)
    return Envelope[PageOut[AdminUserOut]](data=PageOut[AdminUserOut](**data))


@router.get("/{user_id}", response_model=Envelope[AdminUserOut])
async def admin_get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    caller_id: int = Depends(get_current_user_id),
) -> Envelope[AdminUserOut]:
    data = await get_user(db, caller_id=caller_id, user_id=user_id)
    return Envelope[AdminUserOut](data=AdminUserOut(**data))


@router.put("/{user_id}", response_model=Envelope[AdminUserUpdatedOut])
async def admin_update_user(
    user_id: int,
    payload: AdminUpdateUserRequest,
    db: AsyncSession = Depends(get_db),
    caller_id: int = Depends(get_current_user_id),
) -> Envelope[AdminUserUpdatedOut]:
    data = await update_user(db, caller_id=caller_id, user_id=user_id, changes=payload.model_dump(exclude_unset=True))
    return Envelope[AdminUserUpdatedOut](message="User updated successfully", data=AdminUserUpdatedOut(**data))


@router.delete("/{user_id}", response_model=Envelope[None])
async def admin_delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    caller_id: int = Depends(get_current_user_id),
) -> Envelope[None]:
    await delete_user(db, caller_id=caller_id, user_id=user_id)
    return Envelope[None](message="User deleted successfully")
