"""
machine_orchestrator.auth.gate

JWT-backed identity gate.

Responsibilities:
- Answer a binary accept/reject for an opaque bearer token.
- Return a typed `GateDecision` so the dispatcher can short-circuit without exceptions.
"""

from __future__ import annotations

from machine_orchestrator.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from machine_orchestrator.domain.ports import GateDecision
from machine_orchestrator.observability.logging import get_logger

log = get_logger(__name__)


class JwtIdentityGate:
    def __init__(self, *, cfg: JwtConfig) -> None:
        self._cfg = cfg

    def validate(self, token: str) -> bool:
        return self.check(token).accepted

    def check(self, token: str | None) -> GateDecision:
        if not token:
            return GateDecision.reject("missing bearer token")
        try:
            payload = decode_and_validate(cfg=self._cfg, token=token)
        except JwtValidationError as e:
            log.info("gate_rejected", reason=str(e))
            return GateDecision.reject(f"invalid token: {e}")
        if not str(payload.get("sub", "")):
            return GateDecision.reject("invalid token subject")
        return GateDecision.accept()
