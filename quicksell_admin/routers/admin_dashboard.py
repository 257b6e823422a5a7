from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from quicksell_admin.core.db import get_db
from quicksell_admin.core.deps import get_client_ip, get_current_user_id
from quicksell_admin.schemas.common import Envelope
from quicksell_admin.schemas.dashboard import DashboardMetricsOut, DashboardOverviewOut
from quicksell_admin.services.dashboard import dashboard_metrics, dashboard_overview

router = APIRouter(prefix="/api/v1/admin", tags=["Admin Dashboard"])


@router.get("/dashboard", response_model=Envelope[DashboardOverviewOut])
async def admin_dashboard_overview(
    db: AsyncSession = Depends(get_db),
    caller_id: int = Depends(get_current_user_id),
) -> Envelope[DashboardOverviewOut]:
    data = await dashboard_overview(db, caller_id=caller_id)
    return Envelope[DashboardOverviewOut](data=DashboardOverviewOut(**data))


@router.get("/metrics", response_model=Envelope[DashboardMetricsOut])
async def admin_dashboard_metrics(
    db: AsyncSession = Depends(get_db),
    caller_id: int = Depends(get_current_user_id),
    ip_address: Optional[str] = Depends(get_client_ip),
) -> Envelope[DashboardMetricsOut]:
    data = await dashboard_metrics(db, caller_id=caller_id, ip_address=ip_address)
    return Envelope[DashboardMetricsOut](data=DashboardMetricsOut(**data))
