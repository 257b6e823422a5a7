from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import Field

from quicksell_admin.schemas.common import CamelModel


class ListingStatusBreakdownOut(CamelModel):
    draft: int = 0
    active: int = 0
    sold: int = 0
    archived: int = 0


class DashboardOverviewOut(CamelModel):
    total_users: int = 0
    total_listings: int = 0
    listings_by_status: ListingStatusBreakdownOut = Field(default_factory=ListingStatusBreakdownOut)
    total_points: int = 0
    avg_listings_per_user: float = 0.0


class MetricsOverviewOut(CamelModel):
    total_users: int = 0
    total_listings: int = 0
    connected_accounts: int = 0
    ebay_listings: int = 0
    recent_users: int = 0
    active_users: int = 0


class RevenueEstimateOut(CamelModel):
    # list-price estimate from tier counts, not ledger data
    is_estimate: bool = True
    monthly_revenue: Decimal = Decimal("0.00")
    annual_revenue: Decimal = Decimal("0.00")
    premium_users: int = 0
    premium_plus_users: int = 0


class TopUserOut(CamelModel):
    id: int
    username: str = ""
    email: Optional[str] = None
    subscription_tier: str = ""
    listing_count: int = 0


class DashboardMetricsOut(CamelModel):
    overview: MetricsOverviewOut = Field(default_factory=MetricsOverviewOut)
    subscriptions: dict[str, int] = Field(default_factory=dict)
    listings: ListingStatusBreakdownOut = Field(default_factory=ListingStatusBreakdownOut)
    revenue: RevenueEstimateOut = Field(default_factory=RevenueEstimateOut)
    top_users: list[TopUserOut] = Field(default_factory=list)
