"""
Schema creation and seed data, run from the application startup hook.
"""

from __future__ import annotations

import logging

from sqlalchemy import select

from config.settings import config
from database.models import Base, Role
from database.session import async_session_factory, engine

logger = logging.getLogger(__name__)


async def init_db() -> None:
    """Create missing tables and make sure the default role exists."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        normalized = config.default_role.upper()
        result = await session.execute(
            select(Role).where(Role.normalized_name == normalized)
        )
        if result.scalar_one_or_none() is None:
            session.add(Role(name=config.default_role, normalized_name=normalized))
            await session.commit()
            logger.info("Seeded default role '%s'", config.default_role)
