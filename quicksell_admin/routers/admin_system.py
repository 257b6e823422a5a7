from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from quicksell_admin.core.db import get_db
from quicksell_admin.core.deps import get_current_user_id
from quicksell_admin.schemas.common import Envelope, PageOut
from quicksell_admin.schemas.system import ActivityOut, GrowthSeriesOut, SystemHealthOut
from quicksell_admin.services.system import growth_series, list_activity, system_health

router = APIRouter(prefix="/api/v1/admin", tags=["Admin - System"])


@router.get("/system", response_model=Envelope[SystemHealthOut])
async def admin_system_health(
    db: AsyncSession = Depends(get_db),
    caller_id: int = Depends(get_current_user_id),
) -> Envelope[SystemHealthOut]:
    data = await system_health(db, caller_id=caller_id)
    return Envelope[SystemHealthOut](data=SystemHealthOut(**data))


@router.get("/analytics", response_model=Envelope[GrowthSeriesOut])
async def admin_analytics(
    days: int = Query(default=7),
    db: AsyncSession = Depends(get_db),
    caller_id: int = Depends(get_current_user_id),
) -> Envelope[GrowthSeriesOut]:
    data = await growth_series(db, caller_id=caller_id, days=days)
    return Envelope[GrowthSeriesOut](data=GrowthSeriesOut(**data))


@router.get("/stats", response_model=Envelope[GrowthSeriesOut])
async def admin_stats(
    days: int = Query(default=30),
    db: AsyncSession = Depends(get_db),
    caller_id: int = Depends(get_current_user_id),
) -> Envelope[GrowthSeriesOut]:
    data = await growth_series(db, caller_id=caller_id, days=days)
    return Envelope[GrowthSeriesOut](data=GrowthSeriesOut(**data))


@router.get("/activity", response_model=Envelope[PageOut[ActivityOut]])
async def admin_activity(
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    action: Optional[str] = Query(default=None, max_length=64),
    db: AsyncSession = Depends(get_db),
    caller_id: int = Depends(get_current_user_id),
) -> Envelope[PageOut[ActivityOut]]:
    data = await list_activity(db, caller_id=caller_id, page=page, limit=limit, action=action)
    return Envelope[PageOut[ActivityOut]](data=PageOut[ActivityOut](**data))
