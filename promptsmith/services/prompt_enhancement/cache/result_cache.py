"""
TTL + LRU cache for rewrite results.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from ..models import RewriteResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 100
DEFAULT_TTL_MS = 5 * 60 * 1000


def _now_ms() -> float:
    return time.time() * 1000


@dataclass
class CacheEntry:
    result: RewriteResult
    timestamp: float


class ResultCache:
    """
    In-memory cache keyed by normalized (prompt, context).

    Expired entries are dropped lazily on read; a hit moves the entry to
    the most-recently-used position.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_SIZE,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Optional[Callable[[], float]] = None
    ):
        """
        Initialize result cache.

        Args:
            max_size: Maximum number of entries
            ttl_ms: Time-to-live in milliseconds
            clock: Millisecond clock, wall clock by default
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if ttl_ms <= 0:
            raise ValueError("ttl_ms must be positive")

        self.max_size = max_size
        self.ttl_ms = ttl_ms
        self._clock = clock or _now_ms
        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()

    def _generate_cache_key(self, prompt: str, context: str = "") -> str:
        """Generate cache key"""
        return f"{prompt.strip().lower()}|{(context or '').strip().lower()}"

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp > self.ttl_ms

    def get(self, prompt: str, context: str = "") -> Optional[RewriteResult]:
        """Retrieve cached result"""
        cache_key = self._generate_cache_key(prompt, context)
        entry = self._cache.get(cache_key)
        if entry is None:
            return None

        if self._is_expired(entry, self._clock()):
            del self._cache[cache_key]
            return None

        self._cache.move_to_end(cache_key)
        return entry.result

    def set(self, prompt: str, context: str, result: RewriteResult):
        """Store result in cache"""
        cache_key = self._generate_cache_key(prompt, context)

        # Evict least recently used entry if at capacity
        if cache_key not in self._cache and len(self._cache) >= self.max_size:
            evicted_key, _ = self._cache.popitem(last=False)
            logger.debug(f"Evicted cache entry: {evicted_key[:50]}")

        self._cache[cache_key] = CacheEntry(result=result, timestamp=self._clock())
        self._cache.move_to_end(cache_key)

    def prune(self) -> int:
        """
        Remove all expired entries.

        Returns:
            int: Number of entries removed
        """
        now = self._clock()
        expired = [key for key, entry in self._cache.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._cache[key]
        return len(expired)

    def clear(self):
        """Clear cache entries"""
        self._cache.clear()

    def size(self) -> int:
        return len(self._cache)
