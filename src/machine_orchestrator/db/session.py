"""
machine_orchestrator.db.session

Async SQLAlchemy engine + session factory helpers.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from machine_orchestrator.settings import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    return create_async_engine(settings.database_url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Snapshots are converted to domain objects before the session closes;
    # expire_on_commit=False keeps attribute access after commit free of lazy loads.
    return async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
