"""Observability configuration for the session host."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ObservabilitySettings(BaseSettings):
    """Flags controlling logging/export behavior."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    log_level: str = Field(default="INFO", alias="ARENA_LOG_LEVEL")
    log_json: bool = Field(default=False, alias="ARENA_LOG_JSON")
    service_name: str = Field(default="arena-host", alias="ARENA_SERVICE_NAME")


__all__ = ["ObservabilitySettings"]
