"""Bounded, time-expiring LRU cache for transformation results."""

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from ..utils.time import Clock, monotonic_clock

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached transformation result."""
    transformed_text: str
    created_at: float


class ResponseCache:
    """
    LRU cache with a fixed per-entry time-to-live.

    A successful ``get`` moves the entry to the most-recently-used end but
    does not extend its lifetime. Expired entries are dropped lazily when
    they are looked up, or when ``put`` needs room.
    """

    def __init__(self, max_entries: int = 200, ttl_seconds: float = 600.0,
                 clock: Clock = monotonic_clock):
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at >= self.ttl_seconds

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key`` or None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None

            if self._is_expired(entry, self._clock()):
                del self._entries[key]
                self._misses += 1
                return None

            self._entries.move_to_end(key)
            self._hits += 1
            return entry

    def put(self, key: str, transformed_text: str) -> CacheEntry:
        """Insert or overwrite ``key``, evicting the LRU entry when full."""
        with self._lock:
            now = self._clock()
            entry = CacheEntry(transformed_text=transformed_text, created_at=now)

            if key in self._entries:
                self._entries[key] = entry
                self._entries.move_to_end(key)
                return entry

            if len(self._entries) >= self.max_entries:
                self._purge_expired(now)

            while len(self._entries) >= self.max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug("Evicted least recently used cache entry", cache_key=evicted_key)

            self._entries[key] = entry
            return entry

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if self._is_expired(e, now)]
        for k in expired:
            del self._entries[k]

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()
        logger.info("Response cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not self._is_expired(entry, self._clock())

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        with self._lock:
            return {
                "size": len(self._entries),
                "max_entries": self.max_entries,
                "ttl_seconds": self.ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }
