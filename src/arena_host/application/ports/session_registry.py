"""Port describing session bookkeeping."""

from __future__ import annotations

from typing import Protocol

from arena_host.domain.session import Session, SessionId


class SessionRegistryPort(Protocol):
    """Owns the live sessions of connected clients."""

    def add(self, session_id: SessionId) -> Session:
        """Create and store a new session, raising if the id is taken."""

    def remove(self, session_id: SessionId) -> Session | None:
        """Drop the session if present; absent ids are ignored."""

    def get(self, session_id: SessionId) -> Session | None:
        """Return the live session for ``session_id``."""

    def require(self, session_id: SessionId) -> Session:
        """Return the live session or raise ``UnknownSessionError``."""

    def is_live(self, session: Session) -> bool:
        """Return True while ``session`` is still the registered instance."""

    def count(self) -> int:
        """Return the number of live sessions."""

    def values(self) -> list[Session]:
        """Return a snapshot of the live sessions."""

    def clear(self) -> None:
        """Drop every session."""


__all__ = ["SessionRegistryPort"]
