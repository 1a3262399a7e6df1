"""
machine_orchestrator.api.routers.internal.hardware_sim

Dev/test simulator of the smart machine hardware API.

Responsibilities:
- Accept `POST /internal/v1/hardware/machines/{machine_id}/start` like a real machine would.
- Fault (HTTP 503) for ids listed in `hardware_sim_fail_ids`, so the ERROR path can be
  exercised end to end without hardware.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from starlette.status import HTTP_202_ACCEPTED, HTTP_503_SERVICE_UNAVAILABLE

from machine_orchestrator.api.deps import settings_from_app
from machine_orchestrator.settings import Settings

router = APIRouter(prefix="/internal/v1/hardware", tags=["internal"])


class StartCycleResponse(BaseModel):
    machine_id: str
    status: Literal["STARTED"] = "STARTED"


@router.post(
    "/machines/{machine_id}/start",
    response_model=StartCycleResponse,
    status_code=HTTP_202_ACCEPTED,
)
async def start_cycle(
    machine_id: str,
    settings: Settings = Depends(settings_from_app),
) -> StartCycleResponse:
    if machine_id in settings.hardware_sim_fail_ids:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="Door sensor fault")
    return StartCycleResponse(machine_id=machine_id)
