"""
machine_orchestrator.db.state_store

SQLAlchemy-backed `StateStore`.

Responsibilities:
- Run each store call in its own short transaction (the table is the system of record;
  a write is durable once the call returns True).
- Convert rows into immutable `Machine` snapshots.
- Wrap backend failures (and unreadable rows) in `StateStoreError`.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from machine_orchestrator.db.repositories.machines import MachineRepo
from machine_orchestrator.domain.machine import Machine, MachineStatus
from machine_orchestrator.errors import StateStoreError


class SqlStateStore:
    def __init__(self, *, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _repo(self, *, write: bool) -> AsyncIterator[MachineRepo]:
        try:
            async with self._session_factory() as session:
                yield MachineRepo(session)
                if write:
                    await session.commit()
        except (SQLAlchemyError, LookupError, ValueError) as e:
            # LookupError/ValueError: a stored status outside the known vocabulary.
            raise StateStoreError(str(e)) from e

    async def list_at_location(self, location_id: str) -> list[Machine]:
        async with self._repo(write=False) as repo:
            rows = await repo.list_available_at_location(location_id)
            return [row.to_domain() for row in rows]

    async def get_by_id(self, machine_id: str) -> Machine | None:
        async with self._repo(write=False) as repo:
            row = await repo.get(machine_id)
            return row.to_domain() if row is not None else None

    async def update_status(
        self,
        machine_id: str,
        status: MachineStatus,
        *,
        expected: MachineStatus | None = None,
    ) -> bool:
        async with self._repo(write=True) as repo:
            return await repo.set_status(machine_id, status, expected=expected)

    async def update_job_id(self, machine_id: str, job_id: str | None) -> bool:
        async with self._repo(write=True) as repo:
            return await repo.set_job_id(machine_id, job_id)

    async def assign_job(self, machine_id: str, job_id: str) -> bool:
        async with self._repo(write=True) as repo:
            return await repo.assign_job(machine_id, job_id)

    async def provision(
        self,
        *,
        machine_id: str,
        location_id: str,
        status: MachineStatus = MachineStatus.available,
    ) -> Machine:
        async with self._repo(write=True) as repo:
            row = await repo.create(machine_id=machine_id, location_id=location_id, status=status)
            return row.to_domain()


# --- Module Notes -----------------------------------------------------------
# `provision` exists for dev seeding and tests; in production rows are created by the
# state store's owners and this service only reads and transitions them.
