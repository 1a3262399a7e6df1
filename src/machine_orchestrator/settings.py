"""
machine_orchestrator.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide env-driven settings for the API, store, hardware and cache layers.
- Hide secrets (JWT secret, hardware token) from repr/logging.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MO_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "machine-orchestrator"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Identity gate (token validation only; no role policy in the core)
    jwt_alg: str = "HS256"
    jwt_issuer: str = "machine-idp"
    jwt_audience: str = "machine-api"
    jwt_secret: str = Field(default="dev-only-secret-change-me-before-deploying", repr=False)

    # Authoritative state store
    database_url: str = "sqlite+aiosqlite:///./machines.db"

    # Smart machine hardware API
    hardware_base_url: str = "http://localhost:8080/internal/v1/hardware"
    hardware_api_token: str | None = Field(default=None, repr=False)
    hardware_timeout_seconds: float = Field(default=10.0, gt=0)
    # Dev simulator only: machine ids whose start cycle always faults.
    hardware_sim_fail_ids: list[str] = Field(default_factory=list)

    # Read-through cache
    cache_ttl_seconds: float = Field(default=300.0, gt=0)
    cache_max_entries: int = Field(default=10_000, ge=1)

    # Legacy behavior: unroutable requests answered with 500 instead of 400.
    unroutable_as_server_error: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# List-valued settings (hardware_sim_fail_ids) are read from env as JSON,
# e.g. MO_HARDWARE_SIM_FAIL_IDS='["locker-7"]'.
