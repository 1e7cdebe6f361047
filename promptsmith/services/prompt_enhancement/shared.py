"""
Process-wide services shared by every orchestration call.
"""

import logging
from typing import Optional

from promptsmith.services.vagueness_classification.vagueness_service import VaguenessService

from .cache.result_cache import DEFAULT_MAX_SIZE, DEFAULT_TTL_MS, ResultCache
from .errors import RateLimiterConfigError
from .limits.rate_limiter import DEFAULT_MAX_REQUESTS, DEFAULT_WINDOW_MS, RateLimiter

logger = logging.getLogger(__name__)


class EnhancementServices:
    """
    Container for the rate limiter, result cache and vagueness service.

    Created once per process and injected into orchestrators; tests build
    their own instance instead of touching module globals.
    """

    def __init__(
        self,
        rate_limiter: Optional[RateLimiter] = None,
        cache: Optional[ResultCache] = None,
        vagueness_service: Optional[VaguenessService] = None
    ):
        self._rate_limiter = rate_limiter
        self.cache = cache or ResultCache(DEFAULT_MAX_SIZE, DEFAULT_TTL_MS)
        self.vagueness_service = vagueness_service or VaguenessService()

    @property
    def rate_limiter(self) -> RateLimiter:
        """Shared limiter, created with default configuration on first use"""
        if self._rate_limiter is None:
            self._rate_limiter = RateLimiter(DEFAULT_MAX_REQUESTS, DEFAULT_WINDOW_MS)
        return self._rate_limiter

    def configure_rate_limiter(self, max_requests: int, window_ms: int) -> RateLimiter:
        """
        Create the shared limiter, or confirm an existing one matches.

        Raises:
            RateLimiterConfigError: When a limiter with a different configuration already exists
        """
        if self._rate_limiter is None:
            self._rate_limiter = RateLimiter(max_requests, window_ms)
            logger.info(f"Rate limiter configured: {max_requests} requests per {window_ms}ms")
            return self._rate_limiter

        if not self._rate_limiter.has_config(max_requests, window_ms):
            raise RateLimiterConfigError(
                f"Rate limiter already configured with {self._rate_limiter.max_requests} requests "
                f"per {self._rate_limiter.window_ms}ms; cannot reconfigure to "
                f"{max_requests} per {window_ms}ms"
            )
        return self._rate_limiter

    def reset(self):
        """Clear limiter history and cached results; the trained model is kept"""
        if self._rate_limiter is not None:
            self._rate_limiter.reset()
        self.cache.clear()

    def dispose(self):
        """Release shared state at shutdown"""
        self.reset()
        self._rate_limiter = None
        logger.info("Enhancement services disposed")
