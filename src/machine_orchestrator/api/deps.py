"""
machine_orchestrator.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Encapsulate app.state access (dispatcher, sessionmaker).
- Provide request-scoped DB sessions for readiness checks.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from machine_orchestrator.services.dispatcher import Dispatcher
from machine_orchestrator.settings import Settings


def settings_from_app(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[attr-defined]


def dispatcher_from_app(request: Request) -> Dispatcher:
    # Built once in the app lifespan (`machine_orchestrator.api.app.create_app`).
    return request.app.state.dispatcher  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session
