"""
machine_orchestrator.services.dispatcher

Maps an inbound operation descriptor `{method, path, token, body}` onto one of the
orchestrator's operations.

Responsibilities:
- Run the identity gate exactly once per request, before any routing or store access.
- Match `POST /machine/request`, `GET /machine/{id}` and `POST /machine/{id}/start`.
- Validate the allocation body and translate outcomes into status codes.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from machine_orchestrator.domain.machine import Machine
from machine_orchestrator.domain.outcomes import OperationResult, Outcome, StatusCode
from machine_orchestrator.domain.ports import IdentityGate
from machine_orchestrator.observability.logging import get_logger
from machine_orchestrator.services.orchestrator import Orchestrator

log = get_logger(__name__)

_MACHINE_ID = r"[A-Za-z0-9-]+"
_GET_MACHINE = re.compile(rf"^/machine/({_MACHINE_ID})$")
_START_MACHINE = re.compile(rf"^/machine/({_MACHINE_ID})/start$")
_REQUEST_MACHINE = "/machine/request"


class HttpMethod(enum.StrEnum):
    get = "GET"
    post = "POST"
    put = "PUT"
    delete = "DELETE"


class AllocationRequest(BaseModel):
    # Accepts both snake_case and the legacy camelCase field names.
    model_config = ConfigDict(populate_by_name=True)

    location_id: str = Field(
        min_length=1, max_length=64, validation_alias=AliasChoices("location_id", "locationId")
    )
    job_id: str = Field(
        min_length=1, max_length=128, validation_alias=AliasChoices("job_id", "jobId")
    )


@dataclass(frozen=True, slots=True)
class DispatchRequest:
    method: str
    path: str
    token: str | None = None
    body: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class DispatchResponse:
    status_code: int
    machine: Machine | None = None
    outcome: Outcome = Outcome.ok
    detail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "machine": self.machine.to_dict() if self.machine is not None else None,
            "outcome": self.outcome.value,
            "detail": self.detail,
        }


class Dispatcher:
    def __init__(
        self,
        *,
        gate: IdentityGate,
        orchestrator: Orchestrator,
        unroutable_as_server_error: bool = False,
    ) -> None:
        self._gate = gate
        self._orchestrator = orchestrator
        self._unroutable_as_server_error = unroutable_as_server_error

    async def dispatch(self, request: DispatchRequest) -> DispatchResponse:
        decision = self._gate.check(request.token)
        if not decision.accepted:
            return DispatchResponse(
                status_code=StatusCode.unauthorized,
                outcome=Outcome.unauthorized,
                detail=decision.reason or "Invalid token",
            )

        method = request.method.upper()
        path = request.path.rstrip("/") or "/"

        if method == HttpMethod.post and path == _REQUEST_MACHINE:
            try:
                body = AllocationRequest.model_validate(request.body or {})
            except ValidationError as e:
                return DispatchResponse(
                    status_code=StatusCode.bad_request,
                    outcome=Outcome.bad_request,
                    detail=_first_error(e),
                )
            result = await self._orchestrator.allocate_machine(
                location_id=body.location_id, job_id=body.job_id
            )
            return _respond(result)

        match = _GET_MACHINE.match(path)
        if method == HttpMethod.get and match:
            return _respond(await self._orchestrator.get_machine(machine_id=match.group(1)))

        match = _START_MACHINE.match(path)
        if method == HttpMethod.post and match:
            return _respond(await self._orchestrator.start_machine(machine_id=match.group(1)))

        log.info("unroutable_request", method=method, path=path)
        status = (
            StatusCode.internal_error
            if self._unroutable_as_server_error
            else Outcome.unroutable.status_code
        )
        return DispatchResponse(
            status_code=status,
            outcome=Outcome.unroutable,
            detail=f"No operation for {method} {path}",
        )


def _respond(result: OperationResult) -> DispatchResponse:
    return DispatchResponse(
        status_code=result.outcome.status_code,
        machine=result.machine,
        outcome=result.outcome,
    )


def _first_error(e: ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()))
    return f"{loc}: {first.get('msg', 'invalid')}" if loc else str(first.get("msg", "invalid"))
