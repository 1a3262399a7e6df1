"""
machine_orchestrator.domain.machine

Machine snapshot type and its status vocabulary.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any


class MachineStatus(enum.StrEnum):
    # Values are stored in the state table and returned to clients; treat as stable API contract.
    available = "AVAILABLE"
    awaiting_dropoff = "AWAITING_DROPOFF"
    running = "RUNNING"
    error = "ERROR"


@dataclass(frozen=True, slots=True)
class Machine:
    """
    Immutable snapshot of one machine row as last read from the state store.

    `version` is bumped by the store on every write and orders snapshots of the same id.
    """

    id: str
    location_id: str
    status: MachineStatus
    job_id: str | None = None
    version: int = 0

    def __post_init__(self) -> None:
        # Raises ValueError for anything outside the four known statuses.
        object.__setattr__(self, "status", MachineStatus(self.status))

    @property
    def is_bound(self) -> bool:
        return self.job_id is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "machine_id": self.id,
            "location_id": self.location_id,
            "status": self.status.value,
            "job_id": self.job_id,
            "version": self.version,
        }
