"""
machine_orchestrator.auth

Token handling for the identity gate.

Responsibilities:
- JWT issuing (dev/test) and validation helpers.
- The JWT-backed `IdentityGate` implementation used by the dispatcher.
"""
