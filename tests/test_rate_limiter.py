"""Tests for the per-key refresh throttle."""

from conftest import FakeClock

from plotplanner.services.rate_limiter import InMemoryRateLimiter


def _limiter(clock: FakeClock, window: float = 900, cleanup: float = 3600) -> InMemoryRateLimiter:
    return InMemoryRateLimiter(window_seconds=window, cleanup_interval_seconds=cleanup, clock=clock)


def test_second_check_inside_window_is_rejected(clock):
    limiter = _limiter(clock)

    assert limiter.check("plan-a").allowed is True
    clock.advance(120)
    result = limiter.check("plan-a")

    assert result.allowed is False
    assert result.retry_after == 780


def test_checks_further_apart_than_window_are_allowed(clock):
    limiter = _limiter(clock)

    assert limiter.check("plan-a").allowed
    clock.advance(901)
    assert limiter.check("plan-a").allowed


def test_retry_after_rounds_up(clock):
    limiter = _limiter(clock, window=10)
    limiter.check("k")
    clock.advance(9.2)

    assert limiter.check("k").retry_after == 1


def test_keys_are_independent(clock):
    limiter = _limiter(clock)

    assert limiter.check("plan-a").allowed
    assert limiter.check("plan-b").allowed
    assert not limiter.check("plan-a").allowed


def test_reset_allows_next_check(clock):
    limiter = _limiter(clock)
    limiter.check("plan-a")

    limiter.reset("plan-a")

    assert limiter.check("plan-a").allowed


def test_status_does_not_consume_the_window(clock):
    limiter = _limiter(clock)

    assert limiter.status("plan-a").allowed
    assert limiter.status("plan-a").allowed
    limiter.record("plan-a")
    assert not limiter.status("plan-a").allowed


def test_purge_older_than_drops_expired_entries(clock):
    limiter = _limiter(clock)
    limiter.record("old")
    clock.advance(1000)
    limiter.record("new")

    removed = limiter.purge_older_than(clock())

    assert removed == 1
    assert len(limiter) == 1


def test_lazy_purge_runs_after_cleanup_interval(clock):
    limiter = _limiter(clock, window=60, cleanup=300)
    limiter.record("a")
    limiter.record("b")
    clock.advance(200)
    limiter.status("c")
    assert len(limiter) == 2

    clock.advance(150)
    limiter.status("c")
    assert len(limiter) == 0
