from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Any, Callable

from .config import DEFAULT_WEBSITE_CACHE_CONFIG, WebsiteCacheConfig


class BoundedTTLCache:
    """
    Thread-safe LRU cache whose entries also expire after ``ttl_seconds``.

    When full, the least recently used entry is evicted. ``clock`` is
    injectable so expiry can be tested without sleeping.
    """

    def __init__(
        self,
        config: WebsiteCacheConfig = DEFAULT_WEBSITE_CACHE_CONFIG,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_size = max(1, config.max_size)
        self._ttl = config.ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, tuple[Any, float]] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry and self._clock() - entry[1] < self._ttl:
                self._entries.move_to_end(key)
                self._hits += 1
                return entry[0]
            if entry:
                del self._entries[key]
            self._misses += 1
            return None

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock())
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_size:
                self._entries.popitem(last=False)

    def stats(self) -> dict:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "max_size": self._max_size,
                "ttl_seconds": self._ttl,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
