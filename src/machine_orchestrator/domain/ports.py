"""
machine_orchestrator.domain.ports

Interfaces of the collaborators the core consumes.

Responsibilities:
- Describe the narrow StateStore / HardwareClient / IdentityGate contracts.
- Keep the orchestrator independent from SQLAlchemy, httpx and JWT specifics so tests
  can inject doubles.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from machine_orchestrator.domain.machine import Machine, MachineStatus


@runtime_checkable
class StateStore(Protocol):
    """
    Authoritative per-machine state. Every method raises `StateStoreError` when the
    backend cannot complete the call; mutations return False when the row is missing or
    its precondition no longer holds.
    """

    async def list_at_location(self, location_id: str) -> list[Machine]:
        """AVAILABLE machines at `location_id`, in the store's stable order."""
        ...

    async def get_by_id(self, machine_id: str) -> Machine | None: ...

    async def update_status(
        self,
        machine_id: str,
        status: MachineStatus,
        *,
        expected: MachineStatus | None = None,
    ) -> bool: ...

    async def update_job_id(self, machine_id: str, job_id: str | None) -> bool: ...

    async def assign_job(self, machine_id: str, job_id: str) -> bool:
        """Atomically AVAILABLE -> AWAITING_DROPOFF with `job_id`; False if not AVAILABLE."""
        ...


@runtime_checkable
class HardwareClient(Protocol):
    async def start_cycle(self, machine_id: str) -> None:
        """Raises `HardwareFault` on any failure, timeouts included."""
        ...


@dataclass(frozen=True, slots=True)
class GateDecision:
    accepted: bool
    reason: str | None = None

    @classmethod
    def accept(cls) -> GateDecision:
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: str) -> GateDecision:
        return cls(accepted=False, reason=reason)


@runtime_checkable
class IdentityGate(Protocol):
    def validate(self, token: str) -> bool: ...

    def check(self, token: str | None) -> GateDecision: ...
