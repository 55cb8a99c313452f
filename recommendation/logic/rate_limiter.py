"""
Rate Limiter

Fixed-window request counter for the video-search provider. The window is
rolled over lazily: every acquire checks the elapsed time, so there is no
background timer and tests can drive time through the injected clock.
"""

import threading
from datetime import datetime, timedelta
from typing import Callable, Optional

from .constants import MAX_REQUESTS_PER_DAY, QUOTA_WINDOW


class FixedWindowRateLimiter:
    def __init__(
        self,
        max_requests: int = MAX_REQUESTS_PER_DAY,
        window: timedelta = QUOTA_WINDOW,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.max_requests = max_requests
        self.window = window
        self.clock = clock or datetime.utcnow
        self._lock = threading.Lock()
        self._window_start = self.clock()
        self._count = 0

    def _roll_window(self, now: datetime) -> None:
        if now - self._window_start >= self.window:
            self._window_start = now
            self._count = 0

    def try_acquire(self) -> bool:
        """Consume one request slot; False when the window's budget is spent."""
        with self._lock:
            self._roll_window(self.clock())
            if self._count >= self.max_requests:
                return False
            self._count += 1
            return True

    @property
    def remaining(self) -> int:
        with self._lock:
            self._roll_window(self.clock())
            return max(0, self.max_requests - self._count)

    @property
    def resets_at(self) -> datetime:
        return self._window_start + self.window


# Singleton instance
youtube_rate_limiter = FixedWindowRateLimiter()
