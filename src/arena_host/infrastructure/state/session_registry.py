"""In-memory session registry implementation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from threading import Lock

from arena_host.application.ports.session_registry import SessionRegistryPort
from arena_host.domain.session import Session, SessionId
from arena_host.errors import SessionAlreadyExistsError, UnknownSessionError

logger = logging.getLogger("arena_host.registry")


class InMemorySessionRegistry(SessionRegistryPort):
    """Stores live sessions in memory, keyed by session id."""

    def __init__(self, *, clock: Callable[[], datetime] | None = None) -> None:
        self._sessions: dict[SessionId, Session] = {}
        self._lock = Lock()
        self._clock = clock or (lambda: datetime.now(UTC))

    def add(self, session_id: SessionId) -> Session:
        with self._lock:
            if session_id in self._sessions:
                raise SessionAlreadyExistsError(f"session {session_id!r} already exists")
            session = Session(session_id=session_id, joined_at=self._clock())
            self._sessions[session_id] = session
            total = len(self._sessions)
        logger.debug("session added", extra={"data": {"session_id": str(session_id), "count": total}})
        return session

    def remove(self, session_id: SessionId) -> Session | None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
            total = len(self._sessions)
        if session is not None:
            logger.debug(
                "session removed",
                extra={"data": {"session_id": str(session_id), "count": total}},
            )
        return session

    def get(self, session_id: SessionId) -> Session | None:
        with self._lock:
            session = self._sessions.get(session_id)
        return session

    def require(self, session_id: SessionId) -> Session:
        session = self.get(session_id)
        if session is None:
            raise UnknownSessionError(f"session {session_id!r} not found")
        return session

    def is_live(self, session: Session) -> bool:
        with self._lock:
            return self._sessions.get(session.session_id) is session

    def count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def values(self) -> list[Session]:
        with self._lock:
            return list(self._sessions.values())

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions


__all__ = ["InMemorySessionRegistry"]
