from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from arena_host.application.actions import register_builtin_actions
from arena_host.application.dispatcher import ActionDispatcher
from arena_host.application.rate_limiter import RateLimiter
from arena_host.config.options import ConfigStore, HostOptions
from arena_host.infrastructure.state.session_registry import InMemorySessionRegistry


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 10, 17, 12, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def config() -> ConfigStore:
    return ConfigStore(HostOptions(rate_limit_interval=1.0, max_resource=100))


@pytest.fixture
def registry(clock: FakeClock) -> InMemorySessionRegistry:
    return InMemorySessionRegistry(clock=clock)


@pytest.fixture
def dispatcher(
    registry: InMemorySessionRegistry,
    config: ConfigStore,
    clock: FakeClock,
) -> ActionDispatcher:
    dispatcher = ActionDispatcher(registry, RateLimiter(config), config, clock=clock)
    register_builtin_actions(dispatcher, config)
    return dispatcher
