"""In-memory TTL cache used to avoid repeated vendor calls.

Thread-safe and process-local; swap for Redis behind the same interface when
running more than one instance.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from hashlib import sha256
from typing import Callable

from insight_engine.schemas.analysis import AnalysisType, MergedResult
from insight_engine.utils.text_normalizer import normalize_text

logger = logging.getLogger(__name__)

# Bump when the normalized payload shapes change so stale entries are ignored
CACHE_KEY_VERSION = "v1"


@dataclass
class CacheItem:
    """Container for cached values with expiration metadata."""

    value: MergedResult
    expires_at: float


class SimpleTTLCache:
    """Thread-safe, in-memory TTL cache with LRU eviction.

    Attributes:
        ttl_seconds: Time-to-live applied to all entries.
        max_entries: Maximum number of cached items (None for unlimited).
        clock: Time source in epoch seconds (injectable for tests).
    """

    def __init__(
        self,
        ttl_seconds: int = 300,
        max_entries: int | None = 1024,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._store: OrderedDict[str, CacheItem] = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"SimpleTTLCache(ttl_seconds={self._ttl}, max_entries={self._max_entries}, "
            f"size={len(self._store)}, hits={self._hits}, misses={self._misses}, "
            f"evictions={self._evictions})"
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get(self, key: str) -> MergedResult | None:
        """Retrieve a cached value if it exists and is not expired.

        Expired entries are evicted on read and reported as absent.
        """

        with self._lock:
            item = self._store.get(key)
            if item is None:
                self._misses += 1
                logger.debug("cache.miss", extra={"cache_key": key[:16], "reason": "not_found"})
                return None

            if self._is_expired(item, self._clock()):
                self._evict_single(key)
                self._misses += 1
                logger.debug("cache.miss", extra={"cache_key": key[:16], "reason": "expired"})
                return None

            self._hits += 1
            self._store.move_to_end(key)
            logger.debug("cache.hit", extra={"cache_key": key[:16]})
            return item.value

    def set(self, key: str, value: MergedResult) -> None:
        """Store a value with TTL, evicting as needed."""

        with self._lock:
            self._evict_expired_locked()
            self._store[key] = CacheItem(value=value, expires_at=self._clock() + self._ttl)
            self._store.move_to_end(key)
            self._evict_if_over_capacity_locked()

            logger.debug(
                "cache.set",
                extra={"cache_key": key[:16], "size": len(self._store), "ttl_s": self._ttl},
            )

    def sweep(self) -> int:
        """Remove every expired entry.

        Returns:
            Number of entries removed.
        """

        with self._lock:
            before = self._evictions
            self._evict_expired_locked()
            return self._evictions - before

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""

        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def stats(self) -> dict[str, int | float | None]:
        """Return lightweight cache metrics without exposing values."""

        with self._lock:
            return {
                "ttl_seconds": self._ttl,
                "max_entries": self._max_entries,
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def _evict_single(self, key: str) -> None:
        if self._store.pop(key, None) is not None:
            self._evictions += 1

    def _evict_expired_locked(self) -> None:
        now = self._clock()
        expired_keys = [k for k, item in self._store.items() if self._is_expired(item, now)]
        for key in expired_keys:
            self._evict_single(key)

    def _evict_if_over_capacity_locked(self) -> None:
        if self._max_entries is None:
            return

        while len(self._store) > self._max_entries:
            # popitem(last=False) removes the least recently used entry
            self._store.popitem(last=False)
            self._evictions += 1

    @staticmethod
    def _is_expired(item: CacheItem, now: float) -> bool:
        return now >= item.expires_at


def build_cache_key(text: str, analysis_type: AnalysisType | str) -> str:
    """Build a stable cache key from the full text and the analysis type.

    Whitespace differences do not produce distinct keys; any other change does.

    Returns:
        Hex-encoded SHA-256 digest string.
    """

    type_value = analysis_type.value if isinstance(analysis_type, AnalysisType) else analysis_type
    hasher = sha256()
    hasher.update(CACHE_KEY_VERSION.encode())
    hasher.update(b"\x00")
    hasher.update(type_value.encode())
    hasher.update(b"\x00")
    hasher.update(normalize_text(text).encode("utf-8", errors="ignore"))
    return hasher.hexdigest()
