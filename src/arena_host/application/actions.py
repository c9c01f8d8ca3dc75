"""Built-in remote actions."""

from __future__ import annotations

import math
from collections.abc import Sequence

from arena_host.application.dispatcher import ActionDispatcher
from arena_host.config.options import ConfigStore
from arena_host.domain.action import ActionResult
from arena_host.domain.session import Session
from arena_host.errors import InvalidArgumentError

PING = "Ping"
USE_SKILL = "UseSkill"
APPLY_DAMAGE = "ApplyDamage"

RESOURCE_KEY = "resource"
LAST_SKILL_KEY = "last_skill"


def ping(session: Session, args: Sequence[object]) -> ActionResult:
    return ActionResult.success("Pong")


def use_skill(session: Session, args: Sequence[object]) -> ActionResult:
    skill_id = _single_number(args, label="skill id")
    session.data[LAST_SKILL_KEY] = skill_id
    return ActionResult.success()


class ApplyDamage:
    """Subtracts a numeric amount from the session's tracked resource.

    The result is clamped to ``[0, max_resource]``, so negative amounts heal
    up to the ceiling. The reply payload carries the new value.
    """

    def __init__(self, config: ConfigStore) -> None:
        self._config = config

    def __call__(self, session: Session, args: Sequence[object]) -> ActionResult:
        amount = _single_number(args, label="damage amount")
        current = session.data.get(RESOURCE_KEY)
        if current is None:
            raise InvalidArgumentError("session has no tracked resource")
        updated = _subtract_clamped(current, amount, self._config.current.max_resource)
        session.data[RESOURCE_KEY] = updated
        return ActionResult.success(updated)


class ResourceTracker:
    """Join hook that starts tracking a resource at its configured ceiling."""

    def __init__(self, config: ConfigStore) -> None:
        self._config = config

    def __call__(self, session: Session) -> None:
        track_resource(session, self._config.current.max_resource)


def track_resource(session: Session, value: int | float) -> None:
    """Begin tracking ``value`` as the session's resource."""
    if not _is_number(value):
        raise InvalidArgumentError(f"resource value must be numeric, got {type(value).__name__}")
    session.data[RESOURCE_KEY] = value


def register_builtin_actions(dispatcher: ActionDispatcher, config: ConfigStore) -> None:
    dispatcher.register(PING, ping)
    dispatcher.register(USE_SKILL, use_skill)
    dispatcher.register(APPLY_DAMAGE, ApplyDamage(config))


def _single_number(args: Sequence[object], *, label: str) -> int | float:
    if len(args) != 1:
        raise InvalidArgumentError(f"expected exactly one {label}, got {len(args)} arguments")
    value = args[0]
    if not _is_number(value):
        raise InvalidArgumentError(f"{label} must be numeric, got {type(value).__name__}")
    return value  # type: ignore[return-value]


def _is_number(value: object) -> bool:
    # bool is an int subclass but never a meaningful amount
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # ints are exact and may exceed float range
    return isinstance(value, int) or math.isfinite(value)


def _subtract_clamped(current: int | float, amount: int | float, ceiling: int) -> int | float:
    # compare first: int/float comparison is exact, subtraction may overflow
    if amount >= current:
        return 0
    if amount <= current - ceiling:
        return ceiling
    return current - amount


__all__ = [
    "APPLY_DAMAGE",
    "ApplyDamage",
    "LAST_SKILL_KEY",
    "PING",
    "RESOURCE_KEY",
    "ResourceTracker",
    "USE_SKILL",
    "ping",
    "register_builtin_actions",
    "track_resource",
    "use_skill",
]
