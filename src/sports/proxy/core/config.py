# sports/proxy/core/config.py
"""
Central configuration for the sports proxy runtime.

Environment variables override defaults. Domain and client topology lives
in YAML (see ``core.domain.config`` and ``core.clients.loader``); this module
only holds process-wide knobs.
"""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings with sensible defaults."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    # Config file paths (glob patterns)
    domains_config_paths: list[str] = Field(
        default_factory=lambda: ["config/domains.yaml"]
    )
    clients_config_paths: list[str] = Field(
        default_factory=lambda: ["config/clients.yaml"]
    )

    # Tool schema registry
    schema_refresh_interval: float = Field(
        default=300.0,
        description="Seconds before an in-memory domain schema is considered stale",
    )
    schema_fetch_timeout: float = Field(
        default=10.0, description="Timeout (s) for a single schema fetch"
    )
    schema_cache_dir: str = Field(
        default=".cache/tool_schemas",
        description="Directory of the durable last-known-good schema copies",
    )

    # Tool execution
    tool_timeout: float = Field(
        default=15.0, description="Timeout (s) for a single tool invocation"
    )

    # Result cache TTLs per volatility class (seconds)
    cache_ttl_live: float = 10.0
    cache_ttl_stats: float = 60.0
    cache_ttl_metadata: float = 300.0
    cache_ttl_fantasy: float = 1800.0

    # Resolution
    suggestion_limit: int = 5


settings = Settings()
