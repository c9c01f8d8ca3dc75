"""Per-connection session state."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from datetime import datetime
from threading import RLock
from typing import Any, TypeAlias

SessionId: TypeAlias = Hashable


@dataclass(slots=True, eq=False)
class Session:
    """Ephemeral server-side state for one connected client.

    The registry owns every instance; callers mutate ``last_action_at`` and
    ``data`` through the reference it hands out and must drop that reference
    once the session is removed.
    """

    session_id: SessionId
    joined_at: datetime
    last_action_at: datetime | None = None
    data: dict[str, Any] = field(default_factory=dict)
    lock: RLock = field(default_factory=RLock, repr=False)

    @property
    def last_activity_at(self) -> datetime:
        """Return the most recent admitted action, or the join time if none."""
        return self.last_action_at if self.last_action_at is not None else self.joined_at


__all__ = ["Session", "SessionId"]
