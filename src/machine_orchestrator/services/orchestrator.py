"""
machine_orchestrator.services.orchestrator

Machine allocation and lifecycle orchestration.

Responsibilities:
- Implement allocate / get / start on top of the injected StateStore, HardwareClient
  and ReadThroughCache.
- Sequence every successful store mutation with a re-read and a cache refresh.
- Convert all collaborator failures into an `OperationResult`; nothing raises out of
  the public operations.
"""

from __future__ import annotations

import structlog

from machine_orchestrator.cache.read_through import ReadThroughCache
from machine_orchestrator.domain.lifecycle import is_allocatable, is_startable, require_transition
from machine_orchestrator.domain.machine import Machine, MachineStatus
from machine_orchestrator.domain.outcomes import OperationResult, Outcome
from machine_orchestrator.domain.ports import HardwareClient, StateStore
from machine_orchestrator.errors import HardwareFault, StateStoreError
from machine_orchestrator.observability.logging import get_logger, log_correctness_alarm
from machine_orchestrator.services.locks import KeyedLocks

log = get_logger(__name__)


class Orchestrator:
    def __init__(
        self,
        *,
        store: StateStore,
        hardware: HardwareClient,
        cache: ReadThroughCache,
    ) -> None:
        self._store = store
        self._hardware = hardware
        self._cache = cache
        self._start_locks = KeyedLocks()

    async def allocate_machine(self, *, location_id: str, job_id: str) -> OperationResult:
        """
        Bind `job_id` to the first AVAILABLE machine the store lists at `location_id`.

        The status/job write is a single conditional update; if another writer claims the
        candidate first, the next candidate in the same listing is tried.
        """

        blog = log.bind(location_id=location_id, job_id=job_id)
        try:
            candidates = await self._store.list_at_location(location_id)
        except StateStoreError as e:
            blog.error("allocation_listing_failed", error=str(e))
            return OperationResult(Outcome.internal_error)

        claimed: Machine | None = None
        for candidate in candidates:
            if not is_allocatable(candidate):
                continue
            try:
                won = await self._store.assign_job(candidate.id, job_id)
            except StateStoreError as e:
                # The write may or may not have landed.
                self._cache.invalidate(candidate.id)
                log_correctness_alarm(
                    blog, machine_id=candidate.id, reason="assign_job_failed", error=str(e)
                )
                return OperationResult(Outcome.internal_error)
            if won:
                claimed = candidate
                break
            blog.info("allocation_candidate_taken", machine_id=candidate.id)

        if claimed is None:
            blog.info("allocation_no_machine", candidates=len(candidates))
            return OperationResult(Outcome.not_found)

        snapshot = await self._reread_after_write(claimed.id, blog)
        if snapshot is None:
            return OperationResult(Outcome.internal_error)

        self._cache.put(snapshot.id, snapshot)
        blog.info("machine_allocated", machine_id=snapshot.id, version=snapshot.version)
        return OperationResult(Outcome.ok, snapshot)

    async def get_machine(self, *, machine_id: str) -> OperationResult:
        cached = self._cache.get(machine_id)
        if cached is not None:
            return OperationResult(Outcome.ok, cached)

        try:
            machine = await self._store.get_by_id(machine_id)
        except StateStoreError as e:
            log.error("machine_read_failed", machine_id=machine_id, error=str(e))
            return OperationResult(Outcome.internal_error)
        if machine is None:
            return OperationResult(Outcome.not_found)

        self._cache.put(machine.id, machine)
        return OperationResult(Outcome.ok, machine)

    async def start_machine(self, *, machine_id: str) -> OperationResult:
        # One start per machine at a time in this process: the guard read, the hardware
        # call and the status write must not interleave with another start of the same id.
        async with self._start_locks.hold(machine_id):
            return await self._start(machine_id)

    async def _start(self, machine_id: str) -> OperationResult:
        blog = log.bind(machine_id=machine_id)
        try:
            machine = await self._store.get_by_id(machine_id)
        except StateStoreError as e:
            blog.error("machine_read_failed", error=str(e))
            return OperationResult(Outcome.internal_error)
        if machine is None:
            return OperationResult(Outcome.not_found)

        if not is_startable(machine):
            blog.info("start_rejected", status=machine.status.value)
            return OperationResult(Outcome.invalid_state, machine)

        try:
            await self._hardware.start_cycle(machine_id)
        except HardwareFault as e:
            blog.warning("start_cycle_failed", error=str(e))
            return await self._record_hardware_fault(machine, blog)
        except Exception as e:
            # Any failure to start leaves the hardware state unknown; treat it as a fault.
            blog.warning("start_cycle_failed", error=repr(e), error_type=type(e).__name__)
            return await self._record_hardware_fault(machine, blog)

        return await self._record_running(machine, blog)

    async def _record_hardware_fault(
        self, machine: Machine, blog: structlog.stdlib.BoundLogger
    ) -> OperationResult:
        # Primary effect: the ERROR write. Secondary: re-read + cache refresh, best effort.
        try:
            written = await self._write_status(machine, MachineStatus.error)
        except StateStoreError as e:
            self._cache.invalidate(machine.id)
            log_correctness_alarm(
                blog, machine_id=machine.id, reason="error_status_write_failed", error=str(e)
            )
            return OperationResult(Outcome.hardware_error)
        if not written:
            log_correctness_alarm(
                blog, machine_id=machine.id, reason="error_status_precondition_lost"
            )

        try:
            snapshot = await self._store.get_by_id(machine.id)
        except StateStoreError as e:
            blog.warning("error_snapshot_unavailable", error=str(e))
            snapshot = None

        if snapshot is None:
            self._cache.invalidate(machine.id)
        else:
            self._cache.put(snapshot.id, snapshot)
        return OperationResult(Outcome.hardware_error, snapshot)

    async def _record_running(
        self, machine: Machine, blog: structlog.stdlib.BoundLogger
    ) -> OperationResult:
        try:
            written = await self._write_status(machine, MachineStatus.running)
        except StateStoreError as e:
            self._cache.invalidate(machine.id)
            log_correctness_alarm(
                blog, machine_id=machine.id, reason="running_status_write_failed", error=str(e)
            )
            return OperationResult(Outcome.internal_error)
        if not written:
            self._cache.invalidate(machine.id)
            log_correctness_alarm(
                blog, machine_id=machine.id, reason="running_status_precondition_lost"
            )
            return OperationResult(Outcome.internal_error)

        snapshot = await self._reread_after_write(machine.id, blog)
        if snapshot is None:
            return OperationResult(Outcome.internal_error)

        self._cache.put(snapshot.id, snapshot)
        blog.info("machine_started", version=snapshot.version)
        return OperationResult(Outcome.ok, snapshot)

    async def _write_status(self, machine: Machine, target: MachineStatus) -> bool:
        require_transition(machine.status, target)
        return await self._store.update_status(machine.id, target, expected=machine.status)

    async def _reread_after_write(
        self, machine_id: str, blog: structlog.stdlib.BoundLogger
    ) -> Machine | None:
        try:
            snapshot = await self._store.get_by_id(machine_id)
        except StateStoreError as e:
            snapshot = None
            error: str | None = str(e)
        else:
            error = None
        if snapshot is None:
            # Mutation applied but unobservable: anything cached for this id is suspect.
            self._cache.invalidate(machine_id)
            log_correctness_alarm(
                blog, machine_id=machine_id, reason="reread_after_write_failed", error=error
            )
        return snapshot


# --- Module Notes -----------------------------------------------------------
# The hardware is never retried here. A fault leaves the machine in ERROR until it is
# recovered out of band, after which a new allocation can pick it up again.
