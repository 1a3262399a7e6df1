"""
machine_orchestrator.db.base

SQLAlchemy declarative base.

Responsibilities:
- Hold the metadata shared by the ORM models and `init_db`.
"""

from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
