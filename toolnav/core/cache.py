"""
Bounded, time-stamped value cache for read-heavy responses.

Each entry remembers when it was stored; entries older than ``ttl`` are
treated as missing. The cache is owned by whoever constructs it (the API
keeps one on ``app.state``) and is cleared explicitly after writes.
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Hashable, Optional, Tuple

logger = logging.getLogger(__name__)


class TimestampedCache:
    """
    LRU-bounded cache of ``key -> (stored_at, value)``.

    Parameters
    ----------
    ttl : float
        Seconds an entry stays fresh. ``0`` disables caching.
    max_items : int
        Oldest entries are evicted beyond this size.
    clock : callable, optional
        Time source, ``time.monotonic`` by default.
    """

    def __init__(
        self,
        ttl: float = 60.0,
        max_items: int = 128,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.max_items = max_items
        self._clock = clock
        self._entries: "OrderedDict[Hashable, Tuple[float, Any]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the fresh value for ``key`` or None."""
        with self._lock:
            cached = self._entries.get(key)
            if cached is None:
                return None
            stored_at, value = cached
            if self._clock() - stored_at >= self.ttl:
                self._entries.pop(key, None)
                return None
            self._entries.move_to_end(key)
            return value

    def set(self, key: Hashable, value: Any) -> None:
        if self.ttl <= 0:
            return
        with self._lock:
            self._entries[key] = (self._clock(), value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_items:
                self._entries.popitem(last=False)

    def stored_at(self, key: Hashable) -> Optional[float]:
        """Clock reading at which ``key`` was stored, if present."""
        with self._lock:
            cached = self._entries.get(key)
            return cached[0] if cached else None

    def get_or_refresh(self, key: Hashable, loader: Callable[[], Any]) -> Any:
        """
        Return the cached value, loading and storing it when stale or missing.

        The loader runs outside the lock; two concurrent misses may both load.
        """
        value = self.get(key)
        if value is not None:
            return value
        value = loader()
        self.set(key, value)
        return value

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one entry, or everything when ``key`` is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
        logger.debug("Cache invalidated: %s", "all" if key is None else key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
