"""
machine_orchestrator.errors

Exception types raised by collaborators and the lifecycle model.

The orchestrator catches all of these at its operation boundary and converts them to an
`Outcome`; they never reach an API caller.
"""

from __future__ import annotations


class MachineOrchestratorError(Exception):
    pass


class StateStoreError(MachineOrchestratorError):
    """The authoritative state store could not complete a read or write."""


class HardwareFault(MachineOrchestratorError):
    """A smart machine rejected, failed or timed out on a command."""

    def __init__(self, machine_id: str, message: str) -> None:
        super().__init__(f"{machine_id}: {message}")
        self.machine_id = machine_id
        self.message = message


class InvalidTransition(MachineOrchestratorError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"transition {current} -> {target} is not allowed")
        self.current = current
        self.target = target
