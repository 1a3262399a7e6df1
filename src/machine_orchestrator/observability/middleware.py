"""
machine_orchestrator.observability.middleware

HTTP middleware for request-scoped logging context.

Responsibilities:
- Generate/propagate request IDs (`x-request-id`).
- Bind request metadata (and the addressed machine id, when present) into structlog
  contextvars so every log line of a request can be correlated.
"""

from __future__ import annotations

import re
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

_MACHINE_PATH = re.compile(r"^/machine/(?!request$)([A-Za-z0-9-]+)(?:/|$)")


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        context: dict[str, str] = {
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
        }
        match = _MACHINE_PATH.match(request.url.path)
        if match:
            context["machine_id"] = match.group(1)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(**context)
        try:
            response: Response = await call_next(request)
        finally:
            # Context must not leak into the next request handled by this task.
            structlog.contextvars.clear_contextvars()

        response.headers["x-request-id"] = request_id
        return response
