"""
TTL cache with LRU eviction.

Caches are plain objects owned by whoever composes the dashboard; there
is no module-level cache, so tests and owner ids never share entries.
TTL and the clock are injected, and ``clear`` drops everything.
"""

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheStats:
    """Statistics for cache performance monitoring."""

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    current_size: int = 0
    max_size: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate as percentage."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return (self.hits / total) * 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "expirations": self.expirations,
            "current_size": self.current_size,
            "max_size": self.max_size,
            "hit_rate_percent": round(self.hit_rate, 2),
        }


@dataclass
class CacheEntry(Generic[T]):
    """A single cache entry with expiration tracking."""

    value: T
    expires_at: float
    created_at: float = field(default=0.0)


class TTLCache(Generic[T]):
    """
    TTL cache with LRU eviction.

    Usage:
        cache = TTLCache[list](maxsize=64, ttl=300, name="layouts")
        cache.set("austin", layout)
        cache.get("austin")  # layout, or None once expired
        cache.clear()
    """

    def __init__(
        self,
        maxsize: int = 1000,
        ttl: float = 300,
        name: str = "cache",
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize TTL cache.

        Args:
            maxsize: Maximum number of entries
            ttl: Time-to-live in seconds for entries
            name: Name for identification in logs/stats
            clock: Time source, seconds as float
        """
        self.maxsize = maxsize
        self.ttl = ttl
        self.name = name
        self._clock = clock
        self._cache: OrderedDict[Hashable, CacheEntry[T]] = OrderedDict()
        self._lock = threading.RLock()
        self._stats = CacheStats(max_size=maxsize)

    def _expired(self, entry: CacheEntry[T]) -> bool:
        return self._clock() > entry.expires_at

    def get(self, key: Hashable) -> T | None:
        """Cached value, or None if missing or expired."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self._stats.misses += 1
                return None

            if self._expired(entry):
                del self._cache[key]
                self._stats.expirations += 1
                self._stats.misses += 1
                self._stats.current_size = len(self._cache)
                return None

            self._cache.move_to_end(key)
            self._stats.hits += 1
            return entry.value

    def set(self, key: Hashable, value: T, ttl: float | None = None) -> None:
        """Store a value, evicting the least recently used entry when full."""
        with self._lock:
            now = self._clock()
            actual_ttl = ttl if ttl is not None else self.ttl

            if key in self._cache:
                del self._cache[key]

            while len(self._cache) >= self.maxsize:
                self._cache.popitem(last=False)
                self._stats.evictions += 1

            self._cache[key] = CacheEntry(value=value, expires_at=now + actual_ttl, created_at=now)
            self._stats.current_size = len(self._cache)

    def delete(self, key: Hashable) -> bool:
        """Remove one entry. Returns True if it existed."""
        with self._lock:
            if key in self._cache:
                del self._cache[key]
                self._stats.current_size = len(self._cache)
                return True
            return False

    def clear(self) -> int:
        """Drop every entry. Returns the number of entries cleared."""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            self._stats.current_size = 0
            if count:
                logger.debug("Cleared %d entries from cache %s", count, self.name)
            return count

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return False
            if self._expired(entry):
                del self._cache[key]
                self._stats.expirations += 1
                self._stats.current_size = len(self._cache)
                return False
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    @property
    def stats(self) -> CacheStats:
        with self._lock:
            self._stats.current_size = len(self._cache)
            return self._stats
