"""Thread-safe in-memory cache for travel-time payloads with TTL and size bounds."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional

from ...config import settings


class TravelTimeCache:
    """Key/value cache evicting expired entries first, then least recently used ones."""

    def __init__(
        self,
        max_entries: Optional[int] = None,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_entries = max_entries if max_entries is not None else settings.travel_cache_max_entries
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.travel_cache_ttl_seconds
        if self._max_entries < 1:
            raise ValueError("Cache must hold at least one entry.")
        self._clock = clock
        self._store: OrderedDict[str, tuple[Any, float]] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return None
            value, expire_at = entry
            if self._clock() >= expire_at:
                del self._store[key]
                self._evictions += 1
                self._misses += 1
                return None
            self._store.move_to_end(key)
            self._hits += 1
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            now = self._clock()
            self._store[key] = (value, now + self._ttl)
            self._store.move_to_end(key)
            if len(self._store) > self._max_entries:
                self._purge_expired(now)
            while len(self._store) > self._max_entries:
                self._store.popitem(last=False)
                self._evictions += 1

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, (_, expire_at) in self._store.items() if now >= expire_at]
        for key in expired:
            del self._store[key]
        self._evictions += len(expired)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._store.get(key)
            return entry is not None and self._clock() < entry[1]

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    @property
    def stats(self) -> dict[str, Any]:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._store),
                "max_entries": self._max_entries,
                "ttl_seconds": self._ttl,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": round(self._hits / total, 3) if total > 0 else 0.0,
            }
