import pytest

from harvester.utils.rate_limiter import RateLimiter


def test_first_request_does_not_wait(clock):
    limiter = RateLimiter(0.5, clock=clock.monotonic, sleep=clock.sleep)
    assert limiter.wait() == 0.0
    assert clock.sleeps == []


def test_back_to_back_requests_are_spaced(clock):
    limiter = RateLimiter(0.5, clock=clock.monotonic, sleep=clock.sleep)
    limiter.wait()
    clock.now += 0.2
    limiter.wait()
    assert clock.sleeps == [pytest.approx(0.3)]


def test_no_wait_when_interval_already_elapsed(clock):
    limiter = RateLimiter(0.5, clock=clock.monotonic, sleep=clock.sleep)
    limiter.wait()
    clock.now += 2.0
    limiter.wait()
    assert clock.sleeps == []


def test_limiters_do_not_share_state(clock):
    first = RateLimiter(0.5, clock=clock.monotonic, sleep=clock.sleep)
    second = RateLimiter(0.5, clock=clock.monotonic, sleep=clock.sleep)
    first.wait()
    second.wait()
    assert clock.sleeps == []


def test_negative_interval_rejected():
    with pytest.raises(ValueError):
        RateLimiter(-1)
