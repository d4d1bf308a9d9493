"""
In-memory cache-aside store for repository reads.

Entries expire after a per-entry time-to-live that slides forward on every
hit. There is no size bound and no LRU eviction: the working set in this
service (a few entity lists and recently read items) is small.

One instance is created per process and handed to each repository, which
owns its own key namespace (``bank_accounts:``, ``customers:`` ...).
"""

import copy
import logging
import threading
import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from cachetools import TLRUCache  # type: ignore[import-untyped]

from ..metrics import record_cache_lookup

logger = logging.getLogger(__name__)

DEFAULT_TTL_MINUTES = 10


@dataclass
class _CacheEntry:
    value: Any
    ttl_seconds: float


def _namespace(key: str) -> str:
    return key.split(":", 1)[0]


def _time_to_use(_key: str, entry: _CacheEntry, now: float) -> float:
    return now + entry.ttl_seconds


class MemoryCache:
    """
    Sliding-expiration cache shared by all repositories.

    Values are deep-copied on the way in and out so callers can mutate what
    they get back without corrupting cached state.

    Attributes:
        default_ttl_minutes: TTL used when ``set`` is called without one
        hits: Number of cache hits
        misses: Number of cache misses
        sets: Number of stored values
        invalidations: Number of removed entries
    """

    def __init__(
        self,
        default_ttl_minutes: float = DEFAULT_TTL_MINUTES,
        timer: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize memory cache.

        Args:
            default_ttl_minutes: Default entry lifetime in minutes
            timer: Monotonic clock, replaceable in tests
        """
        self._cache: TLRUCache = TLRUCache(maxsize=float("inf"), ttu=_time_to_use, timer=timer)
        self._lock = threading.RLock()
        self._generations: Dict[str, int] = defaultdict(int)
        self.default_ttl_minutes = default_ttl_minutes

        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.invalidations = 0

        logger.info(f"Initialized MemoryCache with default_ttl_minutes={default_ttl_minutes}")

    def get(self, key: str) -> Optional[Any]:
        """
        Get a value from the cache and renew its lifetime.

        Args:
            key: Cache key

        Returns:
            Copy of the cached value, or None on a miss or after expiry
        """
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                self.misses += 1
                record_cache_lookup(key, hit=False)
                logger.debug(f"Cache MISS: {key}")
                return None

            # Re-inserting recomputes the expiry from now.
            self._cache[key] = entry
            self.hits += 1
            record_cache_lookup(key, hit=True)
            logger.debug(f"Cache HIT: {key}")
            return copy.deepcopy(entry.value)

    def generation(self, key: str) -> int:
        """
        Current invalidation generation of the key's namespace.

        Readers capture it before loading from storage and pass it to ``set``,
        so a load that raced with an invalidation is not cached.
        """
        with self._lock:
            return self._generations[_namespace(key)]

    def set(
        self,
        key: str,
        value: Any,
        ttl_minutes: Optional[float] = None,
        generation: Optional[int] = None,
    ) -> bool:
        """
        Store a value in the cache.

        Args:
            key: Cache key
            value: Value to store; None is not cached
            ttl_minutes: Sliding lifetime in minutes (default: default_ttl_minutes)
            generation: Value of ``generation(key)`` taken before the load;
                the value is dropped if the namespace was invalidated since

        Returns:
            True if the value was stored
        """
        if value is None:
            return False
        ttl = self.default_ttl_minutes if ttl_minutes is None else ttl_minutes
        with self._lock:
            if generation is not None and generation != self._generations[_namespace(key)]:
                logger.debug(f"Cache SKIP stale load: {key}")
                return False
            self._cache[key] = _CacheEntry(copy.deepcopy(value), ttl * 60)
            self.sets += 1
        logger.debug(f"Cache SET: {key} (TTL: {ttl}min)")
        return True

    def invalidate(self, key: str) -> bool:
        """
        Remove one entry.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            self._generations[_namespace(key)] += 1
            removed = self._cache.pop(key, None) is not None
            if removed:
                self.invalidations += 1
        if removed:
            logger.debug(f"Cache INVALIDATE: {key}")
        return removed

    def invalidate_prefix(self, prefix: str) -> int:
        """
        Remove every entry whose key starts with ``prefix``.

        Returns:
            Number of entries removed
        """
        with self._lock:
            self._generations[_namespace(prefix)] += 1
            self._cache.expire()
            keys = [key for key in self._cache.keys() if key.startswith(prefix)]
            for key in keys:
                del self._cache[key]
            self.invalidations += len(keys)
        logger.debug(f"Cache INVALIDATE prefix={prefix}: {len(keys)} entries")
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            for namespace in self._generations:
                self._generations[namespace] += 1
            self._cache.clear()
        logger.info("Cache cleared")

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with size, hits, misses, sets, invalidations and hit_rate
        """
        total_requests = self.hits + self.misses
        hit_rate = (self.hits / total_requests * 100) if total_requests > 0 else 0.0

        return {
            "size": len(self),
            "hits": self.hits,
            "misses": self.misses,
            "sets": self.sets,
            "invalidations": self.invalidations,
            "hit_rate": round(hit_rate, 2),
            "total_requests": total_requests,
        }
