"""
machine_orchestrator.db.models

Machine state table.

Responsibilities:
- Define the `machines` table: one row per physical machine, owned by the state store.
- Carry a per-row `version` bumped on every write, used to order snapshots in the cache.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from machine_orchestrator.db.base import Base
from machine_orchestrator.domain.machine import Machine, MachineStatus


def utcnow() -> datetime:
    return datetime.now(tz=UTC).replace(tzinfo=None)


class MachineRow(Base):
    __tablename__ = "machines"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    location_id: Mapped[str] = mapped_column(String(64), nullable=False)

    # Persist enum values ("AWAITING_DROPOFF"), not member names.
    status: Mapped[MachineStatus] = mapped_column(
        Enum(
            MachineStatus,
            name="machine_status",
            values_callable=lambda e: [m.value for m in e],
            validate_strings=True,
        ),
        nullable=False,
        default=MachineStatus.available,
    )
    job_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)

    version: Mapped[int] = mapped_column(nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (Index("ix_machines_location_status", "location_id", "status"),)

    def to_domain(self) -> Machine:
        return Machine(
            id=self.id,
            location_id=self.location_id,
            status=self.status,
            job_id=self.job_id,
            version=self.version,
        )
