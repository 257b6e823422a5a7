from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.engine import Result
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from quicksell_admin.core.config import settings
from quicksell_admin.core.errors import StoreError, ValidationError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


engine: Optional[AsyncEngine] = None
SessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


def init_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """Create the process-wide engine + session factory. Called once at startup."""
    global engine, SessionLocal

    url = database_url or settings.DATABASE_URL
    kwargs: dict[str, Any] = {"echo": settings.DB_ECHO, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        kwargs["pool_size"] = settings.DB_POOL_SIZE

    engine = create_async_engine(url, **kwargs)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)
    logger.info("Database engine initialized (pool_size=%s)", kwargs.get("pool_size", "default"))
    return engine


async def dispose_engine() -> None:
    global engine, SessionLocal

    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    SessionLocal = None


async def get_db() -> AsyncIterator[AsyncSession]:
    if SessionLocal is None:
        raise RuntimeError("Database engine is not initialized; call init_engine() at startup.")
    async with SessionLocal() as session:
        yield session


async def execute(db: AsyncSession, stmt, params: Optional[dict] = None) -> Result:
    """
    Run one statement with the configured timeout.

    Timeouts and driver/ORM failures come back as StoreError, unique or FK
    violations as ValidationError. The original exception is logged, not exposed.
    """
    try:
        return await asyncio.wait_for(db.execute(stmt, params), timeout=settings.DB_QUERY_TIMEOUT_SECONDS)
    except asyncio.TimeoutError as e:
        logger.error("Query timed out after %ss", settings.DB_QUERY_TIMEOUT_SECONDS)
        raise StoreError() from e
    except IntegrityError as e:
        logger.info("Constraint violation: %s", e.orig)
        raise ValidationError("Conflicts with an existing record") from e
    except SQLAlchemyError as e:
        logger.exception("Query failed")
        raise StoreError() from e


async def ping(db: AsyncSession) -> bool:
    res = await execute(db, text("SELECT 1"))
    return res.scalar_one() == 1


async def commit(db: AsyncSession) -> None:
    try:
        await asyncio.wait_for(db.commit(), timeout=settings.DB_QUERY_TIMEOUT_SECONDS)
    except asyncio.TimeoutError as e:
        logger.error("Commit timed out after %ss", settings.DB_QUERY_TIMEOUT_SECONDS)
        raise StoreError() from e
    except SQLAlchemyError as e:
        logger.exception("Commit failed")
        raise StoreError() from e
