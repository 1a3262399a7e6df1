"""
machine_orchestrator.domain.lifecycle

Machine lifecycle state machine.

Responsibilities:
- Declare which status transitions the core is allowed to perform.
- Provide guard helpers used by the orchestrator before touching the store or hardware.

Transitions:
    AVAILABLE        -> AWAITING_DROPOFF   (allocation)
    AWAITING_DROPOFF -> RUNNING            (start, hardware accepted)
    AWAITING_DROPOFF -> ERROR              (start, hardware fault)

RUNNING and ERROR are terminal for the core; moving a machine back to AVAILABLE is an
out-of-band recovery performed directly against the state store.
"""

from __future__ import annotations

from collections.abc import Mapping

from machine_orchestrator.domain.machine import Machine, MachineStatus
from machine_orchestrator.errors import InvalidTransition

TRANSITIONS: Mapping[MachineStatus, frozenset[MachineStatus]] = {
    MachineStatus.available: frozenset({MachineStatus.awaiting_dropoff}),
    MachineStatus.awaiting_dropoff: frozenset({MachineStatus.running, MachineStatus.error}),
    MachineStatus.running: frozenset(),
    MachineStatus.error: frozenset(),
}


def can_transition(current: MachineStatus, target: MachineStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def require_transition(current: MachineStatus, target: MachineStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(current.value, target.value)


def is_allocatable(machine: Machine) -> bool:
    return machine.status is MachineStatus.available and not machine.is_bound


def is_startable(machine: Machine) -> bool:
    return can_transition(machine.status, MachineStatus.running)
