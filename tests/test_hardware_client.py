from __future__ import annotations

import httpx
import pytest

from machine_orchestrator.api.app import create_app
from machine_orchestrator.errors import HardwareFault
from machine_orchestrator.hardware.client import HttpHardwareClient, create_hardware_http
from machine_orchestrator.settings import Settings


def _client(handler, *, api_token: str | None = None) -> HttpHardwareClient:
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://hardware.test/v2"
    )
    return HttpHardwareClient(http=http, api_token=api_token)


@pytest.mark.asyncio
async def test_start_cycle_posts_to_machine_endpoint() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(202, json={"status": "STARTED"})

    await _client(handler, api_token="hw-token").start_cycle("m-1")

    assert len(seen) == 1
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/v2/machines/m-1/start"
    assert seen[0].headers["Authorization"] == "Bearer hw-token"


@pytest.mark.asyncio
async def test_no_auth_header_without_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert "Authorization" not in request.headers
        return httpx.Response(200)

    await _client(handler).start_cycle("m-1")


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [400, 409, 500, 503])
async def test_error_replies_are_faults(status_code: int) -> None:
    client = _client(lambda request: httpx.Response(status_code))

    with pytest.raises(HardwareFault) as exc:
        await client.start_cycle("m-1")

    assert exc.value.machine_id == "m-1"
    assert str(status_code) in exc.value.message


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        httpx.ReadTimeout("slow door"),
        httpx.ConnectError("no route to machine"),
    ],
)
async def test_transport_failures_are_faults(error: httpx.HTTPError) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise error

    with pytest.raises(HardwareFault):
        await _client(handler).start_cycle("m-1")


def test_http_client_uses_configured_timeout() -> None:
    settings = Settings(hardware_base_url="http://hw.local/api/", hardware_timeout_seconds=2.5)
    http = create_hardware_http(settings)

    assert str(http.base_url) == "http://hw.local/api/"
    assert http.timeout.read == 2.5


@pytest.mark.asyncio
async def test_simulator_round_trip(tmp_path) -> None:
    settings = Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'sim.db'}",
        hardware_sim_fail_ids=["m-broken"],
    )
    app = create_app(settings=settings)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://test/internal/v1/hardware"
    ) as http:
        client = HttpHardwareClient(http=http)
        await client.start_cycle("m-1")
        with pytest.raises(HardwareFault):
            await client.start_cycle("m-broken")
