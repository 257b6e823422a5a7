from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quicksell_admin.core.db import execute
from quicksell_admin.core.errors import Forbidden
from quicksell_admin.models.user import User

logger = logging.getLogger(__name__)


async def ensure_admin(db: AsyncSession, caller_id: int) -> User:
    """
    The one admin gate. Every admin service calls this before touching data.
    A missing caller row and a non-admin caller are both Forbidden.
    """
    res = await execute(db, select(User).where(User.id == int(caller_id)))
    user = res.scalar_one_or_none()

    if user is None or not user.is_admin:
        logger.warning("Admin access denied for user_id=%s", caller_id)
        raise Forbidden()
    return user
