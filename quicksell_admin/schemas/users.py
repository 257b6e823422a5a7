from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from quicksell_admin.models.user import SubscriptionTier
from quicksell_admin.schemas.common import CamelModel


class AdminUserOut(CamelModel):
    id: int
    username: str
    email: str
    subscription_tier: str
    points: int = 0
    current_level: int = 1
    is_admin: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    listing_count: int = 0
    connected_accounts: int = 0


class AdminUpdateUserRequest(CamelModel):
    model_config = ConfigDict(extra="forbid")

    username: Optional[str] = Field(default=None, min_length=3, max_length=64)
    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    subscription_tier: Optional[SubscriptionTier] = None
    points: Optional[int] = Field(default=None, ge=0)
    is_admin: Optional[bool] = None


class AdminUserUpdatedOut(CamelModel):
    id: int
    username: str
    email: str
    subscription_tier: str
    points: int
    is_admin: bool
    updated_at: Optional[datetime] = None
