"""
Time-to-live cache for slowly changing perp configuration.

Perp configs (module addresses, tick spacing) change rarely, so callers keep
one TTLCache per client instead of re-reading them on every request. The
clock is injectable so expiry can be tested without sleeping.
"""

import logging
import time
from typing import Callable, Generic, Hashable, Optional, TypeVar

import cachetools

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

logger = logging.getLogger(__name__)


class _EvictionLoggingCache(cachetools.TTLCache):
    def popitem(self):
        key, value = super().popitem()
        logger.debug("cache full, evicted %s", key)
        return key, value


class TTLCache(Generic[K, V]):
    """
    Bounded mapping whose entries expire ``ttl`` seconds after being stored.

    Not thread-safe; share one instance per thread or guard it externally.

    Args:
        ttl: Seconds an entry stays valid.
        max_size: Maximum number of entries; the least recently used is
            evicted beyond it.
        clock: Returns the current time in seconds. Defaults to time.monotonic.
    """

    def __init__(
        self,
        ttl: float,
        max_size: int = 256,
        clock: Callable[[], float] = time.monotonic
    ):
        if ttl <= 0:
            raise ValueError(f"ttl must be positive: {ttl}")
        if max_size <= 0:
            raise ValueError(f"max_size must be positive: {max_size}")

        self.ttl = ttl
        self.max_size = max_size
        self._cache = _EvictionLoggingCache(maxsize=max_size, ttl=ttl, timer=clock)

    @classmethod
    def from_settings(cls, settings, clock: Callable[[], float] = time.monotonic) -> "TTLCache":
        return cls(
            ttl=settings.config_cache_ttl,
            max_size=settings.config_cache_max_size,
            clock=clock
        )

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """Return the live value for key, or default when missing or expired."""
        try:
            return self._cache[key]
        except KeyError:
            logger.debug("cache miss for %s", key)
            return default

    def put(self, key: K, value: V) -> None:
        self._cache[key] = value

    def clear(self) -> None:
        self._cache.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        self._cache.expire()
        return len(self._cache)
