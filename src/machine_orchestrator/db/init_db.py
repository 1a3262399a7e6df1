"""
machine_orchestrator.db.init_db

Dev/test bootstrap for the machine state table.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from machine_orchestrator.db import models  # noqa: F401  # registers tables on Base.metadata
from machine_orchestrator.db.base import Base


async def init_db(engine: AsyncEngine) -> None:
    """
    Create tables if they don't exist. Production schemas are owned by the state store's
    operators, not by this service.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
