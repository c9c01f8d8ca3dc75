"""Ports onto the host platform that owns client connections."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Protocol

from arena_host.domain.session import SessionId
from arena_host.json_types import JsonValue

PresenceCallback = Callable[[SessionId], None]
TickCallback = Callable[[float], None]
InboundCallback = Callable[..., None]


class ConnectionHandle(Protocol):
    """Active subscription to a host event stream."""

    def release(self) -> None:
        """Unsubscribe; a handle is released exactly once."""


class RemoteChannelPort(Protocol):
    """Named bidirectional remote-call channel."""

    @property
    def name(self) -> str:
        """Identifier the channel was created or located under."""

    def subscribe_inbound(self, callback: InboundCallback) -> ConnectionHandle:
        """Deliver ``callback(session_id, action_name, *args)`` for each inbound call."""

    def send_to(self, session_id: SessionId, payload: JsonValue) -> None:
        """Send a payload to one connected client."""


class HostPlatformPort(Protocol):
    """Session presence, periodic ticks and channel access."""

    def connected_sessions(self) -> Iterable[SessionId]:
        """Return ids of clients that are connected right now."""

    def subscribe_joined(self, callback: PresenceCallback) -> ConnectionHandle:
        """Notify ``callback`` when a client connects."""

    def subscribe_left(self, callback: PresenceCallback) -> ConnectionHandle:
        """Notify ``callback`` when a client disconnects."""

    def subscribe_tick(self, callback: TickCallback) -> ConnectionHandle:
        """Notify ``callback`` on every host tick with the elapsed seconds."""

    def open_channel(self, name: str) -> RemoteChannelPort:
        """Create or locate the named channel, raising ``ChannelUnavailableError``."""


__all__ = [
    "ConnectionHandle",
    "HostPlatformPort",
    "InboundCallback",
    "PresenceCallback",
    "RemoteChannelPort",
    "TickCallback",
]
