"""Routes inbound remote calls to registered action handlers."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from opentelemetry import trace
from opentelemetry.trace import SpanKind

from arena_host.application.ports.session_registry import SessionRegistryPort
from arena_host.application.rate_limiter import RateLimiter
from arena_host.config.options import ConfigStore
from arena_host.domain.action import ActionErrorCode, ActionRequest, ActionResult
from arena_host.domain.session import Session
from arena_host.errors import (
    HandlerFaultError,
    InvalidArgumentError,
    RateLimitedError,
    UnknownActionError,
    UnknownSessionError,
)

ActionHandler = Callable[[Session, Sequence[object]], ActionResult]

action_logger = logging.getLogger("arena_host.actions")

UNKNOWN_ACTION_MESSAGE = "unknown action"
UNKNOWN_SESSION_MESSAGE = "unknown session"
RATE_LIMITED_MESSAGE = "rate limited"

_DENIALS: dict[type[Exception], tuple[ActionErrorCode, str]] = {
    UnknownActionError: (ActionErrorCode.UNKNOWN_ACTION, UNKNOWN_ACTION_MESSAGE),
    UnknownSessionError: (ActionErrorCode.UNKNOWN_SESSION, UNKNOWN_SESSION_MESSAGE),
    RateLimitedError: (ActionErrorCode.RATE_LIMITED, RATE_LIMITED_MESSAGE),
}


class ActionDispatcher:
    """Validates, rate-limits and executes actions on behalf of sessions.

    ``dispatch`` never raises for dispatch-path problems: unknown sessions,
    denied calls, bad arguments and handler faults all come back as failed
    ``ActionResult`` values.
    """

    def __init__(
        self,
        session_registry: SessionRegistryPort,
        rate_limiter: RateLimiter,
        config: ConfigStore,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._sessions = session_registry
        self._rate_limiter = rate_limiter
        self._config = config
        self._clock = clock or (lambda: datetime.now(UTC))
        self._handlers: dict[str, ActionHandler] = {}
        self._sealed = False

    def register(self, name: str, handler: ActionHandler) -> ActionHandler:
        """Bind ``handler`` to ``name``; only allowed before the dispatcher is sealed."""
        if self._sealed:
            raise RuntimeError(f"cannot register action {name!r}: dispatcher is sealed")
        if not name:
            raise ValueError("action name must be a non-empty string")
        if name in self._handlers:
            raise ValueError(f"action {name!r} is already registered")
        self._handlers[name] = handler
        return handler

    def seal(self) -> None:
        """Freeze the handler table."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def names(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def handler_for(self, name: str) -> ActionHandler:
        """Return the handler bound to ``name`` or raise ``UnknownActionError``."""
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownActionError(f"action {name!r} is not registered")
        return handler

    def dispatch(self, request: ActionRequest) -> ActionResult:
        """Run one action request through validation, rate limiting and its handler."""
        tracer = trace.get_tracer("arena_host.actions")
        with tracer.start_as_current_span(
            "action.dispatch",
            kind=SpanKind.SERVER,
            attributes={
                "action.name": request.action_name,
                "session.id": str(request.session_id),
            },
        ) as span:
            result = self._dispatch(request)
            span.set_attribute("action.ok", result.ok)
            if result.error_code is not None:
                span.set_attribute("action.error_code", result.error_code.value)
        return result

    def _dispatch(self, request: ActionRequest) -> ActionResult:
        log_context = _build_action_log_context(request)
        try:
            handler = self.handler_for(request.action_name)
            session = self._sessions.require(request.session_id)
            with session.lock:
                # removal may have raced with this call while we waited on the lock
                if not self._sessions.is_live(session):
                    raise UnknownSessionError(f"session {request.session_id!r} was removed")
                if not self._rate_limiter.admit(session, self._clock()):
                    raise RateLimitedError(f"session {request.session_id!r} acted too soon")
                # handler exceptions are mapped inside _invoke and never reach the clause below
                return self._invoke(handler, session, request, log_context)
        except (UnknownActionError, UnknownSessionError, RateLimitedError) as exc:
            code, message = _DENIALS[type(exc)]
            return self._deny(log_context, code, message, detail=str(exc))

    def _invoke(
        self,
        handler: ActionHandler,
        session: Session,
        request: ActionRequest,
        log_context: dict[str, object],
    ) -> ActionResult:
        debug = self._config.current.debug
        if debug:
            action_logger.info(
                "action dispatched",
                extra={"data": {**log_context, "event": "action_start"}},
            )
        try:
            result = handler(session, request.args)
        except InvalidArgumentError as exc:
            return self._deny(
                log_context,
                ActionErrorCode.INVALID_ARGUMENT,
                str(exc) or "invalid argument",
            )
        except Exception as exc:
            self._log_fault(log_context, exc, include_traceback=debug)
            return ActionResult.failure(ActionErrorCode.HANDLER_FAULT, _describe_fault(exc))

        if not isinstance(result, ActionResult):
            message = f"handler returned {type(result).__name__}, expected ActionResult"
            self._log_fault(log_context, HandlerFaultError(message), include_traceback=False)
            return ActionResult.failure(ActionErrorCode.HANDLER_FAULT, message)

        if debug:
            action_logger.info(
                "action completed",
                extra={
                    "data": {
                        **log_context,
                        "event": "action_success" if result.ok else "action_failure",
                        "ok": result.ok,
                        "error": result.error_message,
                        "reply_preview": _summarize_value(result.reply_payload),
                    }
                },
            )
        return result

    def _deny(
        self,
        log_context: dict[str, object],
        code: ActionErrorCode,
        message: str,
        *,
        detail: str | None = None,
    ) -> ActionResult:
        data: dict[str, object] = {**log_context, "event": "action_denied", "reason": code.value}
        if detail:
            data["detail"] = detail
        action_logger.debug("action denied: %s", message, extra={"data": data})
        return ActionResult.failure(code, message)

    def _log_fault(
        self,
        log_context: dict[str, object],
        exc: Exception,
        *,
        include_traceback: bool,
    ) -> None:
        action_logger.warning(
            "action handler failed",
            exc_info=exc if include_traceback else None,
            extra={
                "data": {
                    **log_context,
                    "event": "action_fault",
                    "error": str(exc),
                    "error_type": exc.__class__.__name__,
                }
            },
        )


def _describe_fault(exc: Exception) -> str:
    if isinstance(exc, HandlerFaultError) and str(exc):
        return str(exc)
    detail = str(exc)
    name = exc.__class__.__name__
    return f"{name}: {detail}" if detail else name


def _build_action_log_context(request: ActionRequest) -> dict[str, object]:
    return {
        "action": request.action_name,
        "session_id": str(request.session_id),
        "args": _summarize_args(request.args),
    }


def _summarize_args(args: Sequence[object]) -> tuple[str, ...]:
    return tuple(_summarize_value(arg) for arg in args)


def _summarize_value(value: object, *, limit: int = 200) -> str:
    try:
        text = repr(value)
    except Exception:  # pragma: no cover - repr should rarely fail
        text = f"<unrepresentable {type(value).__name__}>"
    return text if len(text) <= limit else text[:limit] + "…"


__all__ = [
    "ActionDispatcher",
    "ActionHandler",
    "RATE_LIMITED_MESSAGE",
    "UNKNOWN_ACTION_MESSAGE",
    "UNKNOWN_SESSION_MESSAGE",
]
