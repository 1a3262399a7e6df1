"""
machine_orchestrator.observability.logging

Structured logging configuration for the service.

Responsibilities:
- Configure `structlog` for JSON logs with a stable `service` field.
- Provide bound loggers and the correctness-alarm helper used when the store and the
  cache may have diverged.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(*, service_name: str, level: str) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _static_fields(service=service_name),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _static_fields(**fields: Any):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        for key, value in fields.items():
            event_dict.setdefault(key, value)
        return event_dict

    return processor


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def log_correctness_alarm(
    log: structlog.stdlib.BoundLogger, *, machine_id: str, reason: str, **details: Any
) -> None:
    """
    A mutation was applied but its result could not be observed (or applied state could
    not be confirmed). Alert on `event == "correctness_alarm"`.
    """

    log.error("correctness_alarm", machine_id=machine_id, reason=reason, **details)


# --- Module Notes -----------------------------------------------------------
# Request-scoped metadata (request_id, path, method) is bound in `observability.middleware`.
