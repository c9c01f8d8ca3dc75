"""Runtime host options and the copy-on-write store that serves them."""

from __future__ import annotations

import logging
from enum import Enum
from threading import Lock

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from arena_host.errors import InvalidOptionValueError, UnknownConfigKeyError

logger = logging.getLogger("arena_host.config")


class OptionKey(str, Enum):
    """Recognized host option names."""

    MAX_RESOURCE = "max_resource"
    USE_REMOTE_CHANNEL = "use_remote_channel"
    REMOTE_CHANNEL_NAME = "remote_channel_name"
    DEBUG = "debug"
    RATE_LIMIT_INTERVAL = "rate_limit_interval"
    IDLE_TIMEOUT = "idle_timeout"
    REPLY_ON_FAILURE = "reply_on_failure"


class HostOptions(BaseModel):
    """Immutable snapshot of the host tunables.

    Field names are snake_case; the camelCase aliases (``maxResource``,
    ``rateLimitInterval``, ...) are accepted wherever a key is parsed.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    max_resource: int = Field(default=100, ge=0)
    use_remote_channel: bool = True
    remote_channel_name: str = Field(default="ArenaRemote", min_length=1)
    debug: bool = False
    rate_limit_interval: float = Field(
        default=0.2,
        ge=0.0,
        description="Seconds between admitted actions for one session.",
    )
    idle_timeout: float = Field(
        default=0.0,
        ge=0.0,
        description="Seconds of inactivity before a session is swept; 0 disables the sweep.",
    )
    reply_on_failure: bool = False


_KEYS_BY_ALIAS: dict[str, OptionKey] = {to_camel(key.value): key for key in OptionKey}


def resolve_option_key(key: OptionKey | str) -> OptionKey:
    """Map a field name or camelCase alias onto an ``OptionKey``."""
    if isinstance(key, OptionKey):
        return key
    if not isinstance(key, str):
        raise UnknownConfigKeyError(f"unknown config key {key!r}")
    try:
        return OptionKey(key)
    except ValueError:
        pass
    option = _KEYS_BY_ALIAS.get(key)
    if option is None:
        raise UnknownConfigKeyError(f"unknown config key {key!r}")
    return option


class ConfigStore:
    """Serves the current ``HostOptions`` snapshot and applies admin updates.

    Readers take ``current`` without locking; updates build a validated copy
    under a writer lock and swap the reference.
    """

    def __init__(self, options: HostOptions | None = None) -> None:
        self._current = options if options is not None else HostOptions()
        self._write_lock = Lock()

    @property
    def current(self) -> HostOptions:
        return self._current

    def get_option(self, key: OptionKey | str) -> object:
        option = resolve_option_key(key)
        return getattr(self._current, option.value)

    def set_option(self, key: OptionKey | str, value: object) -> HostOptions:
        """Replace one option value, returning the new snapshot."""
        option = resolve_option_key(key)
        with self._write_lock:
            payload = self._current.model_dump()
            payload[option.value] = value
            try:
                updated = HostOptions.model_validate(payload)
            except ValidationError as exc:
                raise InvalidOptionValueError(
                    f"invalid value for {option.value}: {value!r}",
                ) from exc
            self._current = updated
        logger.info(
            "host option updated",
            extra={"data": {"key": option.value, "value": value}},
        )
        return updated


__all__ = ["ConfigStore", "HostOptions", "OptionKey", "resolve_option_key"]
