"""Action request/result values exchanged with the dispatcher."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from arena_host.domain.session import SessionId
from arena_host.json_types import JsonValue


class ActionErrorCode(str, Enum):
    """Failure categories surfaced on the dispatch path."""

    UNKNOWN_SESSION = "unknown_session"
    RATE_LIMITED = "rate_limited"
    UNKNOWN_ACTION = "unknown_action"
    INVALID_ARGUMENT = "invalid_argument"
    HANDLER_FAULT = "handler_fault"


@dataclass(frozen=True, slots=True)
class ActionRequest:
    """Inbound remote call from a client."""

    session_id: SessionId
    action_name: str
    args: tuple[object, ...] = ()


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Outcome of a dispatched action."""

    ok: bool
    error_message: str | None = None
    reply_payload: JsonValue | None = None
    error_code: ActionErrorCode | None = None

    def __post_init__(self) -> None:
        if self.ok and self.error_code is not None:
            raise ValueError("successful results cannot carry an error code")
        if not self.ok and not self.error_message:
            raise ValueError("failed results require an error message")

    @classmethod
    def success(cls, payload: JsonValue | None = None) -> ActionResult:
        return cls(ok=True, reply_payload=payload)

    @classmethod
    def failure(
        cls,
        code: ActionErrorCode,
        message: str,
        *,
        payload: JsonValue | None = None,
    ) -> ActionResult:
        return cls(ok=False, error_message=message, reply_payload=payload, error_code=code)


__all__ = ["ActionErrorCode", "ActionRequest", "ActionResult"]
