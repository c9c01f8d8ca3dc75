"""Domain-specific exceptions shared across the session host."""

from __future__ import annotations


class UnknownSessionError(LookupError):
    """Raised when a session id is not registered."""


class SessionAlreadyExistsError(ValueError):
    """Raised when adding a session id that is already registered."""


class RateLimitedError(RuntimeError):
    """Raised when a session acts again before its rate-limit interval elapsed."""


class UnknownActionError(LookupError):
    """Raised when an action name has not been registered."""


class InvalidArgumentError(ValueError):
    """Raised by action handlers when the supplied arguments are malformed."""


class HandlerFaultError(RuntimeError):
    """Raised when an action handler fails for reasons other than bad input."""


class UnknownConfigKeyError(KeyError):
    """Raised when updating an option that is not part of the host config."""


class InvalidOptionValueError(ValueError):
    """Raised when an option update would violate a config invariant."""


class ChannelUnavailableError(RuntimeError):
    """Raised when the host cannot create or locate a remote channel."""


class LifecycleError(RuntimeError):
    """Raised on an illegal lifecycle transition."""


__all__ = [
    "ChannelUnavailableError",
    "HandlerFaultError",
    "InvalidArgumentError",
    "InvalidOptionValueError",
    "LifecycleError",
    "RateLimitedError",
    "SessionAlreadyExistsError",
    "UnknownActionError",
    "UnknownConfigKeyError",
    "UnknownSessionError",
]
