"""Init/start/stop wiring between the host platform and the dispatcher."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from enum import Enum
from types import TracebackType

from arena_host.application.dispatcher import UNKNOWN_ACTION_MESSAGE, ActionDispatcher
from arena_host.application.maintenance import IdleSessionSweeper
from arena_host.application.ports.host import ConnectionHandle, HostPlatformPort, RemoteChannelPort
from arena_host.application.ports.session_registry import SessionRegistryPort
from arena_host.config.options import ConfigStore
from arena_host.domain.action import ActionErrorCode, ActionRequest, ActionResult
from arena_host.domain.session import Session, SessionId
from arena_host.errors import LifecycleError, SessionAlreadyExistsError
from arena_host.json_types import JsonValue

JoinHook = Callable[[Session], None]

logger = logging.getLogger("arena_host.lifecycle")


class LifecycleState(str, Enum):
    """States of the session host lifecycle."""

    CREATED = "created"
    INITIALIZED = "initialized"
    RUNNING = "running"
    STOPPED = "stopped"


class SubscriptionSet:
    """Owns the connection handles acquired from the host."""

    def __init__(self) -> None:
        self._handles: list[ConnectionHandle] = []

    def add(self, handle: ConnectionHandle) -> ConnectionHandle:
        self._handles.append(handle)
        return handle

    def __len__(self) -> int:
        return len(self._handles)

    def release_all(self) -> int:
        """Release every handle, returning how many releases failed."""
        handles, self._handles = self._handles, []
        failures = 0
        for handle in handles:
            try:
                handle.release()
            except Exception:
                failures += 1
                logger.exception(
                    "failed to release subscription",
                    extra={"data": {"handle": repr(handle)}},
                )
        return failures


class LifecycleController:
    """Connects host presence, inbound calls and ticks to the session core."""

    def __init__(
        self,
        host: HostPlatformPort,
        session_registry: SessionRegistryPort,
        dispatcher: ActionDispatcher,
        config: ConfigStore,
        *,
        sweeper: IdleSessionSweeper | None = None,
        on_session_joined: Sequence[JoinHook] = (),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._host = host
        self._sessions = session_registry
        self._dispatcher = dispatcher
        self._config = config
        self._sweeper = sweeper
        self._join_hooks = tuple(on_session_joined)
        self._clock = clock or (lambda: datetime.now(UTC))
        self._subscriptions = SubscriptionSet()
        self._channel: RemoteChannelPort | None = None
        self._state = LifecycleState.CREATED

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def channel(self) -> RemoteChannelPort | None:
        """Return the wired remote channel, or None when running without one."""
        return self._channel

    @property
    def active_subscriptions(self) -> int:
        return len(self._subscriptions)

    def init(self) -> None:
        """Track current and future clients and wire the remote channel."""
        if self._state is not LifecycleState.CREATED:
            raise LifecycleError(f"cannot init from state {self._state.value}")
        try:
            self._subscriptions.add(self._host.subscribe_joined(self._on_joined))
            self._subscriptions.add(self._host.subscribe_left(self._on_left))
            # joins are idempotent, so a client seen by both paths is tracked once
            for session_id in list(self._host.connected_sessions()):
                self._on_joined(session_id)
        except Exception:
            self._subscriptions.release_all()
            raise

        options = self._config.current
        if options.use_remote_channel:
            self._attach_channel(options.remote_channel_name)

        self._state = LifecycleState.INITIALIZED
        logger.info(
            "session host initialized",
            extra={
                "data": {
                    "sessions": self._sessions.count(),
                    "channel": self._channel.name if self._channel is not None else None,
                }
            },
        )

    def start(self) -> None:
        """Subscribe to host ticks (idempotent) and freeze the action table."""
        if self._state is LifecycleState.RUNNING:
            return
        if self._state is not LifecycleState.INITIALIZED:
            raise LifecycleError(f"cannot start from state {self._state.value}")
        self._subscriptions.add(self._host.subscribe_tick(self._on_tick))
        self._dispatcher.seal()
        self._state = LifecycleState.RUNNING
        logger.info("session host running", extra={"data": {"actions": list(self._dispatcher.names())}})

    def stop(self) -> None:
        """Release every subscription and drop all sessions (idempotent)."""
        if self._state is LifecycleState.STOPPED:
            return
        released = len(self._subscriptions)
        failures = self._subscriptions.release_all()
        self._channel = None
        self._sessions.clear()
        self._state = LifecycleState.STOPPED
        logger.info(
            "session host stopped",
            extra={"data": {"released": released, "release_failures": failures}},
        )

    def __enter__(self) -> LifecycleController:
        self.init()
        try:
            self.start()
        except Exception:
            self.stop()
            raise
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()

    def _attach_channel(self, name: str) -> None:
        try:
            channel = self._host.open_channel(name)
            handle = channel.subscribe_inbound(self._on_inbound)
        except Exception:
            logger.exception(
                "remote channel unavailable; inbound actions disabled",
                extra={"data": {"channel": name}},
            )
            return
        self._channel = channel
        self._subscriptions.add(handle)

    def _on_joined(self, session_id: SessionId) -> None:
        if self._state is LifecycleState.STOPPED:
            return
        try:
            session = self._sessions.add(session_id)
        except SessionAlreadyExistsError:
            return
        for hook in self._join_hooks:
            try:
                hook(session)
            except Exception:
                logger.exception(
                    "session join hook failed",
                    extra={"data": {"session_id": str(session_id), "hook": repr(hook)}},
                )

    def _on_left(self, session_id: SessionId) -> None:
        if self._state is LifecycleState.STOPPED:
            return
        self._sessions.remove(session_id)

    def _on_inbound(self, session_id: SessionId, action_name: object = None, *args: object) -> None:
        if self._state is LifecycleState.STOPPED:
            return
        try:
            if isinstance(action_name, str):
                result = self._dispatcher.dispatch(
                    ActionRequest(session_id=session_id, action_name=action_name, args=args)
                )
            else:
                result = ActionResult.failure(ActionErrorCode.UNKNOWN_ACTION, UNKNOWN_ACTION_MESSAGE)
            self._reply(session_id, result)
        except Exception:
            logger.exception(
                "inbound call handling failed",
                extra={"data": {"session_id": str(session_id), "action": repr(action_name)}},
            )

    def _reply(self, session_id: SessionId, result: ActionResult) -> None:
        channel = self._channel
        if channel is None:
            return
        payload: JsonValue | None = result.reply_payload
        if not result.ok and payload is None and self._config.current.reply_on_failure:
            payload = {"ok": False, "error": result.error_message}
        if payload is None:
            return
        channel.send_to(session_id, payload)

    def _on_tick(self, elapsed: float) -> None:
        if self._sweeper is None or self._state is not LifecycleState.RUNNING:
            return
        try:
            self._sweeper.sweep(self._clock())
        except Exception:
            logger.exception("maintenance sweep failed", extra={"data": {"elapsed_s": elapsed}})


__all__ = ["JoinHook", "LifecycleController", "LifecycleState", "SubscriptionSet"]
