"""
machine_orchestrator.domain.outcomes

Operation outcomes and their HTTP status mapping.

Responsibilities:
- Give every orchestrator/dispatcher terminal path a typed outcome.
- Map outcomes to the wire status codes (including the non-standard 420 for hardware faults).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from machine_orchestrator.domain.machine import Machine


class StatusCode(enum.IntEnum):
    ok = 200
    bad_request = 400
    unauthorized = 401
    not_found = 404
    hardware_error = 420
    internal_error = 500


class Outcome(enum.StrEnum):
    ok = "OK"
    not_found = "NOT_FOUND"
    invalid_state = "INVALID_STATE"
    hardware_error = "HARDWARE_ERROR"
    internal_error = "INTERNAL_ERROR"
    unauthorized = "UNAUTHORIZED"
    unroutable = "UNROUTABLE"
    bad_request = "BAD_REQUEST"

    @property
    def status_code(self) -> StatusCode:
        return _STATUS_CODES[self]


_STATUS_CODES: dict[Outcome, StatusCode] = {
    Outcome.ok: StatusCode.ok,
    Outcome.not_found: StatusCode.not_found,
    Outcome.invalid_state: StatusCode.bad_request,
    Outcome.hardware_error: StatusCode.hardware_error,
    Outcome.internal_error: StatusCode.internal_error,
    Outcome.unauthorized: StatusCode.unauthorized,
    Outcome.unroutable: StatusCode.bad_request,
    Outcome.bad_request: StatusCode.bad_request,
}


@dataclass(frozen=True, slots=True)
class OperationResult:
    outcome: Outcome
    machine: Machine | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.ok
