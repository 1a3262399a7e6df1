"""
machine_orchestrator.db.repositories.machines

Repository for `MachineRow` entities.

Responsibilities:
- Provision and fetch machine rows.
- Apply status/job writes as single UPDATE statements with optional preconditions, so
  conflicting writers are serialized by the database rather than by this process.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from machine_orchestrator.db.models import MachineRow, utcnow
from machine_orchestrator.domain.machine import MachineStatus


class MachineRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        machine_id: str,
        location_id: str,
        status: MachineStatus = MachineStatus.available,
        job_id: str | None = None,
    ) -> MachineRow:
        row = MachineRow(
            id=machine_id,
            location_id=location_id,
            status=status,
            job_id=job_id,
            version=1,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, machine_id: str) -> MachineRow | None:
        stmt = select(MachineRow).where(MachineRow.id == machine_id)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_available_at_location(self, location_id: str) -> list[MachineRow]:
        # Ordered by id so "first candidate" is stable across calls.
        stmt = (
            select(MachineRow)
            .where(
                MachineRow.location_id == location_id,
                MachineRow.status == MachineStatus.available,
            )
            .order_by(MachineRow.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def set_status(
        self,
        machine_id: str,
        status: MachineStatus,
        *,
        expected: MachineStatus | None = None,
    ) -> bool:
        values: dict[str, Any] = {"status": status}
        if status is MachineStatus.available:
            # A released machine must not keep its job binding.
            values["job_id"] = None
        conditions = [MachineRow.id == machine_id]
        if expected is not None:
            conditions.append(MachineRow.status == expected)
        return await self._apply(conditions, values)

    async def set_job_id(self, machine_id: str, job_id: str | None) -> bool:
        conditions = [MachineRow.id == machine_id]
        if job_id is not None:
            conditions.append(MachineRow.status != MachineStatus.available)
        return await self._apply(conditions, {"job_id": job_id})

    async def assign_job(self, machine_id: str, job_id: str) -> bool:
        # Compare-and-set: status and job binding change together or not at all.
        return await self._apply(
            [MachineRow.id == machine_id, MachineRow.status == MachineStatus.available],
            {"status": MachineStatus.awaiting_dropoff, "job_id": job_id},
        )

    async def _apply(self, conditions: list[Any], values: dict[str, Any]) -> bool:
        stmt = (
            update(MachineRow)
            .where(*conditions)
            .values(**values, version=MachineRow.version + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1
