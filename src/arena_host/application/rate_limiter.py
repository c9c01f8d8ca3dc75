"""Fixed-interval action gate applied per session."""

from __future__ import annotations

from datetime import datetime, timedelta

from arena_host.config.options import ConfigStore
from arena_host.domain.session import Session


class RateLimiter:
    """Admits at most one action per session every ``rate_limit_interval`` seconds.

    The limiter keeps no state of its own; the timestamp lives on the session.
    Callers must hold ``session.lock`` when sessions are shared across threads.
    """

    def __init__(self, config: ConfigStore) -> None:
        self._config = config

    @property
    def interval(self) -> timedelta:
        return timedelta(seconds=self._config.current.rate_limit_interval)

    def admit(self, session: Session, now: datetime) -> bool:
        """Return True and stamp ``last_action_at`` when the session may act."""
        last = session.last_action_at
        if last is not None and now - last < self.interval:
            return False
        session.last_action_at = now
        return True


__all__ = ["RateLimiter"]
