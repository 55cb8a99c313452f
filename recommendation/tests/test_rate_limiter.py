"""
Fixed-window limiter driven by an injected clock.
"""

from datetime import datetime, timedelta

from recommendation.logic.rate_limiter import FixedWindowRateLimiter


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_budget_exhausts_within_window():
    clock = FakeClock(datetime(2024, 1, 1, 8, 0))
    limiter = FixedWindowRateLimiter(max_requests=2, clock=clock)
    assert limiter.try_acquire()
    assert limiter.try_acquire()
    assert not limiter.try_acquire()
    assert limiter.remaining == 0


def test_budget_resets_after_window():
    clock = FakeClock(datetime(2024, 1, 1, 8, 0))
    limiter = FixedWindowRateLimiter(max_requests=1, window=timedelta(days=1), clock=clock)
    assert limiter.try_acquire()
    clock.now += timedelta(hours=23, minutes=59)
    assert not limiter.try_acquire()
    clock.now += timedelta(minutes=1)
    assert limiter.try_acquire()
    assert limiter.resets_at == datetime(2024, 1, 3, 8, 0)


def test_remaining_counts_down():
    limiter = FixedWindowRateLimiter(max_requests=3, clock=FakeClock(datetime(2024, 5, 1)))
    limiter.try_acquire()
    assert limiter.remaining == 2
