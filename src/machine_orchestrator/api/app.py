"""
machine_orchestrator.api.app

FastAPI app factory and composition root.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Construct the collaborators (state store, hardware client, identity gate, cache) once
  per process and inject them into the orchestrator and dispatcher.
- Dispose shared infrastructure (DB engine, hardware HTTP client) on shutdown.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from machine_orchestrator import __version__
from machine_orchestrator.api.routers.dev_auth import router as dev_auth_router
from machine_orchestrator.api.routers.health import router as health_router
from machine_orchestrator.api.routers.internal.hardware_sim import router as hardware_sim_router
from machine_orchestrator.api.routers.machines import router as machines_router
from machine_orchestrator.auth.gate import JwtIdentityGate
from machine_orchestrator.auth.jwt import JwtConfig
from machine_orchestrator.cache.read_through import ReadThroughCache, get_machine_cache
from machine_orchestrator.db.init_db import init_db
from machine_orchestrator.db.session import create_engine, create_sessionmaker
from machine_orchestrator.db.state_store import SqlStateStore
from machine_orchestrator.domain.ports import HardwareClient, IdentityGate
from machine_orchestrator.hardware.client import HttpHardwareClient, create_hardware_http
from machine_orchestrator.observability.logging import configure_logging, get_logger
from machine_orchestrator.observability.middleware import RequestContextMiddleware
from machine_orchestrator.services.dispatcher import Dispatcher
from machine_orchestrator.services.orchestrator import Orchestrator
from machine_orchestrator.settings import Settings

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    cache: ReadThroughCache | None = None,
    hardware: HardwareClient | None = None,
    gate: IdentityGate | None = None,
) -> FastAPI:
    """
    `cache`, `hardware` and `gate` override the production collaborators (tests, local
    experiments). By default the process-wide cache singleton is used.
    """

    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        if settings.env in ("dev", "test"):
            await init_db(engine)
        session_factory = create_sessionmaker(engine)
        hardware_http = create_hardware_http(settings)

        store = SqlStateStore(session_factory=session_factory)
        orchestrator = Orchestrator(
            store=store,
            hardware=hardware
            or HttpHardwareClient(http=hardware_http, api_token=settings.hardware_api_token),
            cache=cache if cache is not None else get_machine_cache(),
        )

        app.state.settings = settings
        app.state.engine = engine
        app.state.sessionmaker = session_factory
        app.state.store = store
        app.state.dispatcher = Dispatcher(
            gate=gate or JwtIdentityGate(cfg=JwtConfig.from_settings(settings)),
            orchestrator=orchestrator,
            unroutable_as_server_error=settings.unroutable_as_server_error,
        )
        try:
            yield
        finally:
            await hardware_http.aclose()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Machine Orchestrator",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    # Routes read settings from app.state; set it eagerly so it exists before startup too.
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(machines_router)
    app.include_router(dev_auth_router)
    if settings.env != "prod":
        app.include_router(hardware_sim_router)

    return app
