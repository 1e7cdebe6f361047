"""
Sliding-window rate limiter shared across orchestration calls.
"""

import logging
import time
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 10
DEFAULT_WINDOW_MS = 60000


def _now_ms() -> float:
    return time.time() * 1000


class RateLimiter:
    """
    Admission control over a sliding time window.

    Timestamps older than the window are evicted before every read or
    write, so the list never holds more than max_requests entries.
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize rate limiter.

        Args:
            max_requests: Requests allowed per window
            window_ms: Window length in milliseconds
            clock: Millisecond clock, wall clock by default
        """
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")

        self._max_requests = max_requests
        self._window_ms = window_ms
        self._clock = clock or _now_ms
        self._requests: List[float] = []

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def _cleanup(self, now: float):
        """Drop timestamps that fell out of the window"""
        cutoff = now - self._window_ms
        self._requests = [timestamp for timestamp in self._requests if timestamp > cutoff]

    def can_make_request(self) -> bool:
        """Check whether another request fits in the current window"""
        self._cleanup(self._clock())
        return len(self._requests) < self._max_requests

    def record_request(self):
        """Record a request; ignored when the window is already full"""
        now = self._clock()
        self._cleanup(now)
        if len(self._requests) < self._max_requests:
            self._requests.append(now)
        else:
            logger.debug("Rate limit window full, request not recorded")

    def get_remaining_requests(self) -> int:
        self._cleanup(self._clock())
        return max(0, self._max_requests - len(self._requests))

    def get_time_until_reset(self) -> float:
        """
        Milliseconds until the oldest request leaves the window.

        Recomputed on every call.
        """
        now = self._clock()
        self._cleanup(now)
        if not self._requests:
            return 0
        return max(0, self._requests[0] + self._window_ms - now)

    def reset(self):
        """Forget all recorded requests"""
        self._requests.clear()

    def has_config(self, max_requests: int, window_ms: int) -> bool:
        return self._max_requests == max_requests and self._window_ms == window_ms
