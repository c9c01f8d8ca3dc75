"""Tick-driven maintenance of idle sessions."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from arena_host.application.ports.session_registry import SessionRegistryPort
from arena_host.config.options import ConfigStore
from arena_host.domain.session import SessionId

logger = logging.getLogger("arena_host.maintenance")


class IdleSessionSweeper:
    """Removes sessions whose last activity is older than ``idle_timeout``."""

    def __init__(self, session_registry: SessionRegistryPort, config: ConfigStore) -> None:
        self._sessions = session_registry
        self._config = config

    def sweep(self, now: datetime) -> list[SessionId]:
        timeout = self._config.current.idle_timeout
        if timeout <= 0:
            return []
        cutoff = now - timedelta(seconds=timeout)
        expired: list[SessionId] = []
        for session in self._sessions.values():
            with session.lock:
                if not self._sessions.is_live(session) or session.last_activity_at >= cutoff:
                    continue
                self._sessions.remove(session.session_id)
            expired.append(session.session_id)
        if expired:
            logger.info(
                "swept idle sessions",
                extra={
                    "data": {
                        "expired": [str(session_id) for session_id in expired],
                        "idle_timeout_s": timeout,
                    }
                },
            )
        return expired


__all__ = ["IdleSessionSweeper"]
