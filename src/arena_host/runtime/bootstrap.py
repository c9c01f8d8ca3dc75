"""Runtime wiring for the session host."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from arena_host.application.actions import ResourceTracker, register_builtin_actions
from arena_host.application.dispatcher import ActionDispatcher
from arena_host.application.lifecycle import LifecycleController
from arena_host.application.maintenance import IdleSessionSweeper
from arena_host.application.ports.host import HostPlatformPort
from arena_host.application.rate_limiter import RateLimiter
from arena_host.config.options import ConfigStore
from arena_host.infrastructure.state.session_registry import InMemorySessionRegistry
from arena_host.observability.logging import configure_logging
from arena_host.observability.tracing import configure_tracing
from arena_host.runtime.settings import Settings

logger = logging.getLogger("arena_host.runtime")


@dataclass(frozen=True, slots=True)
class RuntimeContext:
    """Aggregated runtime components for one session host."""

    settings: Settings
    config: ConfigStore
    session_registry: InMemorySessionRegistry
    rate_limiter: RateLimiter
    dispatcher: ActionDispatcher
    sweeper: IdleSessionSweeper
    controller: LifecycleController


def build_runtime(
    host: HostPlatformPort,
    settings: Settings | None = None,
    *,
    clock: Callable[[], datetime] | None = None,
) -> RuntimeContext:
    """Construct the session core and bind it to ``host``.

    The returned controller is still in the created state; callers register
    any extra actions on ``dispatcher`` before ``controller.start()``.
    """
    resolved = settings or Settings.load()
    resolved_clock = clock or (lambda: datetime.now(UTC))
    config = ConfigStore(resolved.session_host.to_options())
    logger.info(
        "building session host runtime",
        extra={"data": {"options": config.current.model_dump()}},
    )

    registry = InMemorySessionRegistry(clock=resolved_clock)
    rate_limiter = RateLimiter(config)
    dispatcher = ActionDispatcher(registry, rate_limiter, config, clock=resolved_clock)
    register_builtin_actions(dispatcher, config)
    sweeper = IdleSessionSweeper(registry, config)
    controller = LifecycleController(
        host,
        registry,
        dispatcher,
        config,
        sweeper=sweeper,
        on_session_joined=(ResourceTracker(config),),
        clock=resolved_clock,
    )
    return RuntimeContext(
        settings=resolved,
        config=config,
        session_registry=registry,
        rate_limiter=rate_limiter,
        dispatcher=dispatcher,
        sweeper=sweeper,
        controller=controller,
    )


def configure_observability(settings: Settings) -> None:
    """Apply logging and tracing config; the host debug option forces DEBUG logs."""
    observability = settings.observability
    configure_logging(
        root_level_env="ARENA_LOG_LEVEL",
        root_default=observability.log_level,
        package_level="DEBUG" if settings.session_host.debug else None,
        json_payload=observability.log_json,
    )
    configure_tracing(service_name=observability.service_name)


__all__ = ["RuntimeContext", "build_runtime", "configure_observability"]
