from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from quicksell_admin.core.db import Base
from quicksell_admin.models._types import BigIntPK, JSONType


class ListingStatus(str, Enum):
    draft = "draft"
    active = "active"
    sold = "sold"
    archived = "archived"


# Legacy vocabulary -> canonical status
STATUS_ALIASES: dict[str, ListingStatus] = {
    "published": ListingStatus.active,
}


class Listing(Base):
    __tablename__ = "listings"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    # SET NULL keeps soft-deleted history around after the owner is removed
    user_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ListingStatus.draft.value, server_default="draft"
    )
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    # {"ebay": {...}, "facebook": {...}} as written by the posting workers
    marketplace_listings: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
