"""Bounded in-memory result cache.

Classification is deterministic for a given (chain, transaction), so the
engine can reuse earlier results when the same transaction is requested
again (e.g. a report regenerated for the same hash).

Supports:
- A hard entry limit with oldest-first eviction
- Optional TTL
- Thread-safe operations
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheEntry:
    """Represents a cached value with timestamp."""

    __slots__ = ("value", "timestamp")

    def __init__(self, value: Any, timestamp: float):
        self.value = value
        self.timestamp = timestamp

    def is_expired(self, ttl_seconds: Optional[int]) -> bool:
        """Check if this entry has expired."""
        if not ttl_seconds:
            return False
        return time.time() - self.timestamp >= ttl_seconds


class ResultCache:
    """
    FIFO-bounded cache.

    Usage:
        cache = ResultCache(max_entries=100, namespace="classification")

        cache.set(key, result)
        cached = cache.get(key)

        result = cache.get_or_set(key, lambda: compute())
    """

    def __init__(
        self,
        max_entries: int = 100,
        ttl_seconds: Optional[int] = None,
        namespace: str = "",
    ):
        """
        Initialize the cache.

        Args:
            max_entries: Entry limit; 0 disables caching entirely
            ttl_seconds: Entry lifetime (None or 0 for no expiry)
            namespace: Prefix for cache keys
        """
        self.max_entries = max(0, int(max_entries))
        self.ttl_seconds = ttl_seconds
        self.namespace = namespace

        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @property
    def enabled(self) -> bool:
        return self.max_entries > 0

    def _make_key(self, key: str) -> str:
        """Generate full cache key with namespace."""
        if self.namespace:
            return f"{self.namespace}:{key}"
        return key

    def get(self, key: str) -> Optional[Any]:
        """Get a value, or None when missing or expired."""
        if not self.enabled:
            return None
        full_key = self._make_key(key)
        with self._lock:
            entry = self._entries.get(full_key)
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired(self.ttl_seconds):
                del self._entries[full_key]
                self._misses += 1
                return None
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store a value, evicting the oldest entries beyond the limit."""
        if not self.enabled:
            return
        full_key = self._make_key(key)
        with self._lock:
            if full_key in self._entries:
                del self._entries[full_key]
            self._entries[full_key] = CacheEntry(value, time.time())
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug(f"Evicted cache entry {evicted}")

    def delete(self, key: str) -> bool:
        full_key = self._make_key(key)
        with self._lock:
            return self._entries.pop(full_key, None) is not None

    def clear(self) -> int:
        """Clear all entries. Returns number cleared."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def get_or_set(self, key: str, compute: Callable[[], T]) -> T:
        """Return the cached value, computing and storing it on a miss."""
        cached = self.get(key)
        if cached is not None:
            return cached
        value = compute()
        if value is not None:
            self.set(key, value)
        return value

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return self._make_key(key) in self._entries

    def stats(self) -> dict:
        """Return cache statistics."""
        with self._lock:
            return {
                "namespace": self.namespace,
                "entries": len(self._entries),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }


def create_result_cache(max_entries: int = 100, ttl_seconds: Optional[int] = None) -> ResultCache:
    """Create the cache used by the classification engine."""
    return ResultCache(max_entries=max_entries, ttl_seconds=ttl_seconds, namespace="classification")
