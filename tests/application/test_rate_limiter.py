from __future__ import annotations

from datetime import UTC, datetime, timedelta

from arena_host.application.rate_limiter import RateLimiter
from arena_host.config.options import ConfigStore, HostOptions
from arena_host.domain.session import Session

START = datetime(2025, 10, 17, 12, tzinfo=UTC)


def _session() -> Session:
    return Session(session_id="player-1", joined_at=START)


def test_first_action_is_always_admitted() -> None:
    limiter = RateLimiter(ConfigStore(HostOptions(rate_limit_interval=3600)))
    session = _session()

    assert limiter.admit(session, START)
    assert session.last_action_at == START


def test_denied_action_leaves_timestamp_unchanged() -> None:
    limiter = RateLimiter(ConfigStore(HostOptions(rate_limit_interval=1.0)))
    session = _session()
    limiter.admit(session, START)

    assert not limiter.admit(session, START + timedelta(seconds=0.5))
    assert session.last_action_at == START
    # the denied attempt does not push the window forward
    assert limiter.admit(session, START + timedelta(seconds=1.0))
    assert session.last_action_at == START + timedelta(seconds=1.0)


def test_zero_interval_admits_everything() -> None:
    limiter = RateLimiter(ConfigStore(HostOptions(rate_limit_interval=0)))
    session = _session()

    assert limiter.admit(session, START)
    assert limiter.admit(session, START)


def test_interval_follows_config_updates() -> None:
    config = ConfigStore(HostOptions(rate_limit_interval=10.0))
    limiter = RateLimiter(config)
    session = _session()
    limiter.admit(session, START)

    config.set_option("rate_limit_interval", 1.0)

    assert limiter.interval == timedelta(seconds=1)
    assert limiter.admit(session, START + timedelta(seconds=2))


def test_clock_moving_backwards_is_denied() -> None:
    limiter = RateLimiter(ConfigStore(HostOptions(rate_limit_interval=1.0)))
    session = _session()
    limiter.admit(session, START)

    assert not limiter.admit(session, START - timedelta(seconds=5))
