"""
tests.conftest

Shared fixtures and in-memory doubles for the store, hardware and identity gate.

The doubles count calls so tests can assert which collaborators an operation touched.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Callable
from dataclasses import replace

import pytest

from machine_orchestrator.cache.read_through import ReadThroughCache
from machine_orchestrator.domain.machine import Machine, MachineStatus
from machine_orchestrator.domain.ports import GateDecision
from machine_orchestrator.errors import HardwareFault, StateStoreError
from machine_orchestrator.services.dispatcher import Dispatcher
from machine_orchestrator.services.orchestrator import Orchestrator


class FakeStateStore:
    def __init__(self) -> None:
        self.rows: dict[str, Machine] = {}
        self.calls: Counter[str] = Counter()
        # op name -> call numbers that fail (None: every call fails)
        self._broken: dict[str, set[int] | None] = {}

    def seed(
        self,
        machine_id: str,
        location_id: str = "loc-1",
        status: MachineStatus = MachineStatus.available,
        job_id: str | None = None,
    ) -> Machine:
        machine = Machine(
            id=machine_id, location_id=location_id, status=status, job_id=job_id, version=1
        )
        self.rows[machine_id] = machine
        return machine

    def break_op(self, op: str, *, on_call: int | None = None) -> None:
        if on_call is None:
            self._broken[op] = None
        else:
            calls = self._broken.setdefault(op, set())
            if calls is not None:
                calls.add(on_call)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())

    async def _enter(self, op: str) -> None:
        self.calls[op] += 1
        # Yield so concurrent callers interleave between read and write.
        await asyncio.sleep(0)
        if op in self._broken:
            failing = self._broken[op]
            if failing is None or self.calls[op] in failing:
                raise StateStoreError(f"{op} unavailable")

    def _write(self, machine_id: str, **changes) -> None:
        current = self.rows[machine_id]
        self.rows[machine_id] = replace(current, version=current.version + 1, **changes)

    async def list_at_location(self, location_id: str) -> list[Machine]:
        await self._enter("list_at_location")
        return sorted(
            (
                m
                for m in self.rows.values()
                if m.location_id == location_id and m.status is MachineStatus.available
            ),
            key=lambda m: m.id,
        )

    async def get_by_id(self, machine_id: str) -> Machine | None:
        await self._enter("get_by_id")
        return self.rows.get(machine_id)

    async def update_status(
        self,
        machine_id: str,
        status: MachineStatus,
        *,
        expected: MachineStatus | None = None,
    ) -> bool:
        await self._enter("update_status")
        current = self.rows.get(machine_id)
        if current is None or (expected is not None and current.status is not expected):
            return False
        if status is MachineStatus.available:
            self._write(machine_id, status=status, job_id=None)
        else:
            self._write(machine_id, status=status)
        return True

    async def update_job_id(self, machine_id: str, job_id: str | None) -> bool:
        await self._enter("update_job_id")
        current = self.rows.get(machine_id)
        if current is None or (job_id is not None and current.status is MachineStatus.available):
            return False
        self._write(machine_id, job_id=job_id)
        return True

    async def assign_job(self, machine_id: str, job_id: str) -> bool:
        await self._enter("assign_job")
        current = self.rows.get(machine_id)
        if current is None or current.status is not MachineStatus.available:
            return False
        self._write(machine_id, status=MachineStatus.awaiting_dropoff, job_id=job_id)
        return True


class FakeHardware:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.fault_ids: set[str] = set()
        self.timeout_ids: set[str] = set()
        self.delay: float = 0.0
        # machine id -> arbitrary exception raised instead of a HardwareFault
        self.raise_ids: dict[str, Exception] = {}
        # runs while the cycle is "in flight", before any failure is raised
        self.on_start: Callable[[str], None] | None = None

    async def start_cycle(self, machine_id: str) -> None:
        self.calls.append(machine_id)
        if self.on_start is not None:
            self.on_start(machine_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if machine_id in self.timeout_ids:
            raise TimeoutError(f"{machine_id} did not answer")
        if machine_id in self.fault_ids:
            raise HardwareFault(machine_id, "door jammed")
        if machine_id in self.raise_ids:
            raise self.raise_ids[machine_id]


class FakeGate:
    def __init__(self, *tokens: str) -> None:
        self.tokens = set(tokens)
        self.checks = 0

    def validate(self, token: str) -> bool:
        return token in self.tokens

    def check(self, token: str | None) -> GateDecision:
        self.checks += 1
        if not token:
            return GateDecision.reject("missing bearer token")
        if not self.validate(token):
            return GateDecision.reject("invalid token")
        return GateDecision.accept()


@pytest.fixture
def store() -> FakeStateStore:
    return FakeStateStore()


@pytest.fixture
def hardware() -> FakeHardware:
    return FakeHardware()


@pytest.fixture
def cache() -> ReadThroughCache:
    return ReadThroughCache(ttl_seconds=300, max_entries=100)


@pytest.fixture
def orchestrator(
    store: FakeStateStore, hardware: FakeHardware, cache: ReadThroughCache
) -> Orchestrator:
    return Orchestrator(store=store, hardware=hardware, cache=cache)


@pytest.fixture
def gate() -> FakeGate:
    return FakeGate("good-token")


@pytest.fixture
def dispatcher(gate: FakeGate, orchestrator: Orchestrator) -> Dispatcher:
    return Dispatcher(gate=gate, orchestrator=orchestrator)
