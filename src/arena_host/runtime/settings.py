"""Configuration helpers for session host runtime wiring."""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from arena_host.config.host import HostSettings
from arena_host.config.observability import ObservabilitySettings


class Settings(BaseSettings):
    """Session host runtime configuration resolved from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    session_host: HostSettings = Field(default_factory=HostSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def load(cls) -> Settings:
        instance = cls()
        logger = logging.getLogger("arena_host.settings")
        logger.info("session host settings loaded: %r", instance)
        return instance


__all__ = ["Settings"]
