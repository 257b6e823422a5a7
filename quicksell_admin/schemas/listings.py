from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from quicksell_admin.schemas.common import CamelModel


class AdminListingOut(CamelModel):
    id: int
    user_id: Optional[int] = None
    username: Optional[str] = None
    title: str
    description: Optional[str] = None
    status: str
    price: Optional[Decimal] = None
    category: Optional[str] = None
    marketplace_listings: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None
