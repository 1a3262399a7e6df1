"""
machine_orchestrator.api.routers.machines

HTTP entry point for machine operations.

Responsibilities:
- Forward every `/machine/...` request (method, path, bearer token, JSON body) to the
  dispatcher unchanged, so routing and the identity gate live in one place.
- Render the dispatcher's response with its status code.
"""

from __future__ import annotations

import json
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from machine_orchestrator.api.deps import dispatcher_from_app
from machine_orchestrator.services.dispatcher import DispatchRequest, Dispatcher

router = APIRouter(tags=["machines"])

_bearer = HTTPBearer(auto_error=False)


# Every method reaches the dispatcher so the gate runs and unknown operations are
# answered as unroutable rather than by the framework.
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/machine", methods=_ALL_METHODS)
@router.api_route("/machine/{rest:path}", methods=_ALL_METHODS)
async def machine_operation(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    dispatcher: Dispatcher = Depends(dispatcher_from_app),
) -> JSONResponse:
    response = await dispatcher.dispatch(
        DispatchRequest(
            method=request.method,
            path=request.url.path,
            token=creds.credentials if creds is not None else None,
            body=await _json_object(request),
        )
    )
    return JSONResponse(status_code=int(response.status_code), content=response.to_dict())


async def _json_object(request: Request) -> dict[str, Any]:
    # Unparseable or non-object bodies are treated as empty; the dispatcher reports the
    # missing fields after the gate has run.
    raw = await request.body()
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}
