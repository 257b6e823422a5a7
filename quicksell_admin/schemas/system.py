from __future__ import annotations

from datetime import date as date_type, datetime
from typing import Any, Optional

from pydantic import Field

from quicksell_admin.schemas.common import CamelModel


class DatabaseHealthOut(CamelModel):
    status: str = "healthy"
    connected: bool = True


class TableCountsOut(CamelModel):
    users: int = 0
    listings: int = 0
    marketplace_accounts: int = 0


class SystemHealthOut(CamelModel):
    database: DatabaseHealthOut = Field(default_factory=DatabaseHealthOut)
    tables: TableCountsOut = Field(default_factory=TableCountsOut)
    uptime: str = "0h 0m"


class DailyCountOut(CamelModel):
    date: date_type
    count: int = 0


class GrowthSeriesOut(CamelModel):
    days: int
    user_growth: list[DailyCountOut] = Field(default_factory=list)
    listing_growth: list[DailyCountOut] = Field(default_factory=list)


class ActivityOut(CamelModel):
    id: int
    action: str
    target_type: Optional[str] = None
    target_id: Optional[str] = None
    details: Optional[dict[str, Any]] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None
    admin_id: Optional[int] = None
    username: Optional[str] = None
    email: Optional[str] = None
