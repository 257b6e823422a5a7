"""Shared fixtures: a throwaway SQLite database and an HTTP client bound to it."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import httpx
import jwt
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

import quicksell_admin.models  # noqa: F401
from quicksell_admin.core.config import settings
from quicksell_admin.core.db import Base, get_db
from quicksell_admin.main import app
from quicksell_admin.models.listing import Listing
from quicksell_admin.models.marketplace import EbayListing, MarketplaceAccount
from quicksell_admin.models.user import User


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def make_token(user_id: int) -> str:
    return jwt.encode({"sub": str(user_id), "type": "access"}, settings.JWT_SECRET, algorithm=settings.JWT_ALG)


def auth_headers(user_id: int) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh file-backed SQLite database per test."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'admin.db'}")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def _override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


class Seeder:
    """Small helpers for inserting rows; every call commits."""

    def __init__(self, db):
        self.db = db
        self._n = 0

    async def user(
        self,
        username: Optional[str] = None,
        *,
        email: Optional[str] = None,
        tier: str = "free",
        is_admin: bool = False,
        points: int = 0,
        created_at: Optional[datetime] = None,
    ) -> User:
        self._n += 1
        username = username or f"user{self._n}"
        u = User(
            username=username,
            email=email or f"{username}@example.com",
            subscription_tier=tier,
            is_admin=is_admin,
            points=points,
            created_at=created_at or (utcnow() - timedelta(seconds=1000 - self._n)),
            updated_at=utcnow(),
        )
        self.db.add(u)
        await self.db.commit()
        return u

    async def listing(
        self,
        owner: Optional[User],
        *,
        title: str = "Vintage lamp",
        description: Optional[str] = None,
        status: str = "active",
        price: str = "10.00",
        deleted: bool = False,
        created_at: Optional[datetime] = None,
    ) -> Listing:
        self._n += 1
        lst = Listing(
            user_id=owner.id if owner is not None else None,
            title=title,
            description=description,
            status=status,
            price=Decimal(price),
            category="home",
            marketplace_listings={"ebay": {"posted": False}},
            deleted_at=utcnow() if deleted else None,
            created_at=created_at or (utcnow() - timedelta(seconds=1000 - self._n)),
            updated_at=utcnow(),
        )
        self.db.add(lst)
        await self.db.commit()
        return lst

    async def account(self, owner: User, *, marketplace: str = "ebay", is_active: bool = True) -> MarketplaceAccount:
        acc = MarketplaceAccount(user_id=owner.id, marketplace=marketplace, is_active=is_active, created_at=utcnow())
        self.db.add(acc)
        await self.db.commit()
        return acc

    async def ebay_listing(self, listing: Listing) -> EbayListing:
        row = EbayListing(listing_id=listing.id, user_id=listing.user_id, ebay_item_id=f"item-{listing.id}", created_at=utcnow())
        self.db.add(row)
        await self.db.commit()
        return row


@pytest_asyncio.fixture
async def seed(db):
    return Seeder(db)


@pytest_asyncio.fixture
async def admin(seed):
    return await seed.user("root", email="root@quicksell.app", is_admin=True)


@pytest_asyncio.fixture
async def regular_user(seed):
    return await seed.user("plainjane", email="jane@example.com")
