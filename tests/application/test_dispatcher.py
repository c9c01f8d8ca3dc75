from __future__ import annotations

import threading
from collections.abc import Sequence

import pytest

from arena_host.application.dispatcher import ActionDispatcher
from arena_host.domain.action import ActionErrorCode, ActionRequest, ActionResult
from arena_host.domain.session import Session
from arena_host.errors import (
    HandlerFaultError,
    InvalidArgumentError,
    RateLimitedError,
    UnknownActionError,
    UnknownSessionError,
)
from arena_host.infrastructure.state.session_registry import InMemorySessionRegistry


def _request(action: str, *args: object, session_id: object = "player-1") -> ActionRequest:
    return ActionRequest(session_id=session_id, action_name=action, args=args)


def test_ping_replies_pong(dispatcher: ActionDispatcher, registry: InMemorySessionRegistry) -> None:
    registry.add("player-1")

    result = dispatcher.dispatch(_request("Ping"))

    assert result == ActionResult(ok=True, reply_payload="Pong")


def test_rate_limit_half_interval_then_after_interval(
    dispatcher: ActionDispatcher,
    registry: InMemorySessionRegistry,
    clock,
) -> None:
    registry.add("player-1")

    first = dispatcher.dispatch(_request("Ping"))
    clock.advance(0.5)
    second = dispatcher.dispatch(_request("Ping"))

    assert first.ok
    assert not second.ok
    assert second.error_message == "rate limited"
    assert second.error_code is ActionErrorCode.RATE_LIMITED

    clock.advance(1.1)
    third = dispatcher.dispatch(_request("Ping"))
    clock.advance(1.1)
    fourth = dispatcher.dispatch(_request("Ping"))
    assert third.ok
    assert fourth.ok


def test_rate_limit_is_per_session(dispatcher: ActionDispatcher, registry: InMemorySessionRegistry) -> None:
    registry.add("player-1")
    registry.add("player-2")

    assert dispatcher.dispatch(_request("Ping", session_id="player-1")).ok
    assert dispatcher.dispatch(_request("Ping", session_id="player-2")).ok


@pytest.mark.parametrize("session_id", ["player-1", "ghost"])
def test_unknown_action_for_any_session(
    dispatcher: ActionDispatcher,
    registry: InMemorySessionRegistry,
    session_id: str,
) -> None:
    registry.add("player-1")

    result = dispatcher.dispatch(_request("Teleport", session_id=session_id))

    assert not result.ok
    assert result.error_message == "unknown action"
    assert result.error_code is ActionErrorCode.UNKNOWN_ACTION


def test_unknown_action_does_not_consume_rate_limit(
    dispatcher: ActionDispatcher,
    registry: InMemorySessionRegistry,
) -> None:
    session = registry.add("player-1")

    dispatcher.dispatch(_request("Teleport"))

    assert session.last_action_at is None
    assert dispatcher.dispatch(_request("Ping")).ok


def test_removed_session_is_unknown(dispatcher: ActionDispatcher, registry: InMemorySessionRegistry) -> None:
    registry.add("player-1")
    request = _request("Ping")
    registry.remove("player-1")

    result = dispatcher.dispatch(request)

    assert result == ActionResult.failure(ActionErrorCode.UNKNOWN_SESSION, "unknown session")


def test_removal_while_waiting_for_session_lock(
    dispatcher: ActionDispatcher,
    registry: InMemorySessionRegistry,
) -> None:
    session = registry.add("player-1")
    results: list[ActionResult] = []

    with session.lock:
        worker = threading.Thread(target=lambda: results.append(dispatcher.dispatch(_request("Ping"))))
        worker.start()
        worker.join(timeout=0.1)
        registry.remove("player-1")
    worker.join(timeout=2.0)

    assert results[0].error_message == "unknown session"


def test_handler_fault_is_isolated(
    dispatcher: ActionDispatcher,
    registry: InMemorySessionRegistry,
    clock,
) -> None:
    def explode(session: Session, args: Sequence[object]) -> ActionResult:
        raise ZeroDivisionError("boom")

    dispatcher.register("Explode", explode)
    registry.add("player-1")
    registry.add("player-2")

    result = dispatcher.dispatch(_request("Explode"))

    assert not result.ok
    assert result.error_code is ActionErrorCode.HANDLER_FAULT
    assert result.error_message == "ZeroDivisionError: boom"
    # other sessions and other actions keep working
    assert dispatcher.dispatch(_request("Ping", session_id="player-2")).ok
    clock.advance(2)
    assert dispatcher.dispatch(_request("Ping")).ok


def test_handler_fault_error_message_is_passed_through(
    dispatcher: ActionDispatcher,
    registry: InMemorySessionRegistry,
) -> None:
    def refuse(session: Session, args: Sequence[object]) -> ActionResult:
        raise HandlerFaultError("inventory service offline")

    dispatcher.register("Refuse", refuse)
    registry.add("player-1")

    result = dispatcher.dispatch(_request("Refuse"))

    assert result.error_message == "inventory service offline"
    assert result.error_code is ActionErrorCode.HANDLER_FAULT


def test_invalid_argument_becomes_failure(
    dispatcher: ActionDispatcher,
    registry: InMemorySessionRegistry,
) -> None:
    def picky(session: Session, args: Sequence[object]) -> ActionResult:
        raise InvalidArgumentError("expected a string")

    dispatcher.register("Picky", picky)
    registry.add("player-1")

    result = dispatcher.dispatch(_request("Picky", 1))

    assert result == ActionResult.failure(ActionErrorCode.INVALID_ARGUMENT, "expected a string")


def test_handler_returning_wrong_type_is_a_fault(
    dispatcher: ActionDispatcher,
    registry: InMemorySessionRegistry,
) -> None:
    dispatcher.register("Sloppy", lambda session, args: "done")  # type: ignore[arg-type, return-value]
    registry.add("player-1")

    result = dispatcher.dispatch(_request("Sloppy"))

    assert result.error_code is ActionErrorCode.HANDLER_FAULT
    assert "str" in (result.error_message or "")


def test_handler_result_is_returned_unchanged(
    dispatcher: ActionDispatcher,
    registry: InMemorySessionRegistry,
) -> None:
    expected = ActionResult.failure(
        ActionErrorCode.INVALID_ARGUMENT,
        "not your turn",
        payload={"reason": "turn"},
    )
    dispatcher.register("Custom", lambda session, args: expected)
    registry.add("player-1")

    assert dispatcher.dispatch(_request("Custom")) is expected


def test_rate_limited_call_does_not_invoke_handler(
    dispatcher: ActionDispatcher,
    registry: InMemorySessionRegistry,
) -> None:
    calls: list[tuple[object, ...]] = []

    def record(session: Session, args: Sequence[object]) -> ActionResult:
        calls.append(tuple(args))
        return ActionResult.success()

    dispatcher.register("Record", record)
    registry.add("player-1")

    dispatcher.dispatch(_request("Record", 1))
    dispatcher.dispatch(_request("Record", 2))

    assert calls == [(1,)]


def test_register_rejects_duplicates_and_sealed(dispatcher: ActionDispatcher) -> None:
    with pytest.raises(ValueError):
        dispatcher.register("Ping", lambda session, args: ActionResult.success())

    dispatcher.seal()

    assert dispatcher.sealed
    with pytest.raises(RuntimeError):
        dispatcher.register("Late", lambda session, args: ActionResult.success())
    assert set(dispatcher.names()) == {"Ping", "UseSkill", "ApplyDamage"}


def test_debug_logging_reports_dispatch(
    dispatcher: ActionDispatcher,
    registry: InMemorySessionRegistry,
    config,
    caplog: pytest.LogCaptureFixture,
) -> None:
    config.set_option("debug", True)
    registry.add("player-1")

    with caplog.at_level("INFO", logger="arena_host.actions"):
        dispatcher.dispatch(_request("Ping"))

    messages = [record.getMessage() for record in caplog.records if record.name == "arena_host.actions"]
    assert "action dispatched" in messages
    assert "action completed" in messages


def test_handler_for_unknown_name_raises(dispatcher: ActionDispatcher) -> None:
    assert dispatcher.handler_for("Ping") is not None
    with pytest.raises(UnknownActionError):
        dispatcher.handler_for("Fly")


@pytest.mark.parametrize("error_type", [UnknownSessionError, RateLimitedError, UnknownActionError])
def test_denial_errors_raised_by_handler_are_faults(
    dispatcher: ActionDispatcher,
    registry: InMemorySessionRegistry,
    error_type: type[Exception],
) -> None:
    def leak(session: Session, args: Sequence[object]) -> ActionResult:
        raise error_type("inner lookup failed")

    dispatcher.register("Leak", leak)
    registry.add("player-1")

    result = dispatcher.dispatch(_request("Leak"))

    assert result.error_code is ActionErrorCode.HANDLER_FAULT
    assert result.error_message == f"{error_type.__name__}: inner lookup failed"
