"""
machine_orchestrator.db

SQLAlchemy (async) adapter for the authoritative machine state table.

Responsibilities:
- ORM model, engine/session setup and the thin machine repository.
- `SqlStateStore`, the StateStore implementation the orchestrator is wired with.
"""
