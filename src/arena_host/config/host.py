"""Host option defaults resolved from the environment."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from arena_host.config.options import HostOptions


class HostSettings(BaseSettings):
    """Session host tunables loaded at startup."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    max_resource: int = Field(default=100, ge=0, alias="ARENA_MAX_RESOURCE")
    use_remote_channel: bool = Field(default=True, alias="ARENA_USE_REMOTE_CHANNEL")
    remote_channel_name: str = Field(default="ArenaRemote", alias="ARENA_REMOTE_CHANNEL_NAME")
    debug: bool = Field(default=False, alias="ARENA_DEBUG")
    rate_limit_interval: float = Field(
        default=0.2,
        ge=0.0,
        alias="ARENA_RATE_LIMIT_INTERVAL",
        description="Seconds between admitted actions per session.",
    )
    idle_timeout: float = Field(default=0.0, ge=0.0, alias="ARENA_IDLE_TIMEOUT")
    reply_on_failure: bool = Field(default=False, alias="ARENA_REPLY_ON_FAILURE")

    def to_options(self) -> HostOptions:
        return HostOptions(
            max_resource=self.max_resource,
            use_remote_channel=self.use_remote_channel,
            remote_channel_name=self.remote_channel_name,
            debug=self.debug,
            rate_limit_interval=self.rate_limit_interval,
            idle_timeout=self.idle_timeout,
            reply_on_failure=self.reply_on_failure,
        )


__all__ = ["HostSettings"]
