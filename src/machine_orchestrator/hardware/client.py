"""
machine_orchestrator.hardware.client

HTTP client for the smart machine hardware API.

Responsibilities:
- Issue start-cycle commands to physical machines.
- Translate every failure mode (transport error, timeout, non-2xx reply) into
  `HardwareFault`; the caller reacts to the fault, it never retries.
"""

from __future__ import annotations

import httpx

from machine_orchestrator.errors import HardwareFault
from machine_orchestrator.observability.logging import get_logger
from machine_orchestrator.settings import Settings

log = get_logger(__name__)


class HttpHardwareClient:
    def __init__(self, *, http: httpx.AsyncClient, api_token: str | None = None) -> None:
        self._http = http
        self._api_token = api_token

    def _headers(self) -> dict[str, str]:
        if not self._api_token:
            return {}
        return {"Authorization": f"Bearer {self._api_token}"}

    async def start_cycle(self, machine_id: str) -> None:
        try:
            r = await self._http.post(f"/machines/{machine_id}/start", headers=self._headers())
            r.raise_for_status()
        except httpx.TimeoutException as e:
            log.warning("hardware_timeout", machine_id=machine_id)
            raise HardwareFault(machine_id, "start cycle timed out") from e
        except httpx.HTTPStatusError as e:
            log.warning(
                "hardware_rejected", machine_id=machine_id, status_code=e.response.status_code
            )
            raise HardwareFault(
                machine_id, f"start cycle rejected with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            log.warning("hardware_unreachable", machine_id=machine_id, error=str(e))
            raise HardwareFault(machine_id, f"start cycle failed: {e}") from e


def create_hardware_http(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.hardware_base_url.rstrip("/"),
        timeout=httpx.Timeout(settings.hardware_timeout_seconds),
    )


# --- Module Notes -----------------------------------------------------------
# The timeout is the only cancellation mechanism for a start command; a timed-out
# start is indistinguishable from any other fault to the orchestrator.
