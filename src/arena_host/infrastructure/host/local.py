"""In-process host platform used by local development and tests."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from threading import Lock
from typing import Generic, TypeVar

from arena_host.domain.session import SessionId
from arena_host.errors import ChannelUnavailableError
from arena_host.json_types import JsonValue

CallbackT = TypeVar("CallbackT", bound=Callable[..., None])

logger = logging.getLogger("arena_host.host.local")


class _EventStream(Generic[CallbackT]):
    """Ordered subscriber list for one host event."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._subscribers: dict[int, CallbackT] = {}
        self._ids = itertools.count(1)
        self._lock = Lock()

    def subscribe(self, callback: CallbackT) -> LocalSubscription:
        with self._lock:
            token = next(self._ids)
            self._subscribers[token] = callback
        return LocalSubscription(stream=self, token=token)

    def unsubscribe(self, token: int) -> None:
        with self._lock:
            if self._subscribers.pop(token, None) is None:
                raise RuntimeError(f"subscription {token} on {self.name!r} already released")

    def emit(self, *args: object) -> int:
        with self._lock:
            callbacks = list(self._subscribers.values())
        for callback in callbacks:
            callback(*args)
        return len(callbacks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscribers)


@dataclass(slots=True)
class LocalSubscription:
    """Connection handle returned by every ``LocalHost`` subscription."""

    stream: _EventStream[Callable[..., None]]
    token: int

    def release(self) -> None:
        self.stream.unsubscribe(self.token)


@dataclass(slots=True)
class LocalChannel:
    """Remote channel that records outbound payloads."""

    name: str
    connected: Callable[[SessionId], bool]
    sent: list[tuple[SessionId, JsonValue]] = field(default_factory=list)
    _inbound: _EventStream[Callable[..., None]] = field(init=False)

    def __post_init__(self) -> None:
        self._inbound = _EventStream(f"{self.name}.inbound")

    def subscribe_inbound(self, callback: Callable[..., None]) -> LocalSubscription:
        return self._inbound.subscribe(callback)

    def send_to(self, session_id: SessionId, payload: JsonValue) -> None:
        if not self.connected(session_id):
            logger.debug(
                "dropping payload for disconnected client",
                extra={"data": {"channel": self.name, "session_id": str(session_id)}},
            )
            return
        self.sent.append((session_id, payload))

    def call(self, session_id: SessionId, action_name: object, *args: object) -> int:
        """Deliver an inbound call as if ``session_id`` sent it; returns subscriber count."""
        return self._inbound.emit(session_id, action_name, *args)

    def sent_to(self, session_id: SessionId) -> list[JsonValue]:
        return [payload for target, payload in self.sent if target == session_id]

    @property
    def subscriber_count(self) -> int:
        return len(self._inbound)


class LocalHost:
    """Event-bus implementation of the host platform ports.

    ``connect``/``disconnect``/``tick`` simulate what a real host delivers;
    each returns the number of subscribers notified.
    """

    def __init__(self, *, channels_enabled: bool = True) -> None:
        self._channels_enabled = channels_enabled
        self._connected: list[SessionId] = []
        self._channels: dict[str, LocalChannel] = {}
        self._joined: _EventStream[Callable[[SessionId], None]] = _EventStream("joined")
        self._left: _EventStream[Callable[[SessionId], None]] = _EventStream("left")
        self._tick: _EventStream[Callable[[float], None]] = _EventStream("tick")

    def connected_sessions(self) -> Iterable[SessionId]:
        return tuple(self._connected)

    def subscribe_joined(self, callback: Callable[[SessionId], None]) -> LocalSubscription:
        return self._joined.subscribe(callback)

    def subscribe_left(self, callback: Callable[[SessionId], None]) -> LocalSubscription:
        return self._left.subscribe(callback)

    def subscribe_tick(self, callback: Callable[[float], None]) -> LocalSubscription:
        return self._tick.subscribe(callback)

    def open_channel(self, name: str) -> LocalChannel:
        if not self._channels_enabled:
            raise ChannelUnavailableError(f"remote channel {name!r} cannot be created")
        channel = self._channels.get(name)
        if channel is None:
            channel = LocalChannel(name=name, connected=self.is_connected)
            self._channels[name] = channel
        return channel

    def channel(self, name: str) -> LocalChannel:
        return self._channels[name]

    def is_connected(self, session_id: SessionId) -> bool:
        return session_id in self._connected

    def connect(self, session_id: SessionId) -> int:
        if session_id in self._connected:
            raise ValueError(f"client {session_id!r} is already connected")
        self._connected.append(session_id)
        return self._joined.emit(session_id)

    def disconnect(self, session_id: SessionId) -> int:
        self._connected.remove(session_id)
        return self._left.emit(session_id)

    def tick(self, elapsed: float) -> int:
        return self._tick.emit(elapsed)

    @property
    def subscriber_count(self) -> int:
        total = len(self._joined) + len(self._left) + len(self._tick)
        return total + sum(channel.subscriber_count for channel in self._channels.values())


__all__ = ["LocalChannel", "LocalHost", "LocalSubscription"]
