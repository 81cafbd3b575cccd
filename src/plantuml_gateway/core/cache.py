"""
Rendered diagram cache.

Renderers take a cache as an injected capability with ``get``/``put``.
Storing a value twice is harmless because the same key always renders to the
same bytes, so the only locking needed is the cache's own.
"""

import hashlib
import threading
import time
from collections import OrderedDict
from typing import Optional, Protocol, Tuple


def make_cache_key(source: str, format_name: str) -> str:
    """SHA-256 of the diagram source and the output format name."""
    return hashlib.sha256(f"{source}:{format_name}".encode("utf-8")).hexdigest()


class DiagramCache(Protocol):
    def get(self, key: str) -> Optional[bytes]:
        ...

    def put(self, key: str, data: bytes) -> None:
        ...

    def purge_expired(self) -> int:
        ...

    def __len__(self) -> int:
        ...


class NullDiagramCache:
    """Cache that never stores anything."""

    def get(self, key: str) -> Optional[bytes]:
        return None

    def put(self, key: str, data: bytes) -> None:
        return None

    def purge_expired(self) -> int:
        return 0

    def __len__(self) -> int:
        return 0


class InMemoryDiagramCache:
    """Thread-safe in-process cache with a TTL and a bounded size.

    When the cache is full, the oldest entry is evicted first.
    """

    def __init__(self, ttl_seconds: float = 3600, max_entries: int = 512, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, bytes]]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            stored_at, data = entry
            if self._clock() - stored_at > self.ttl_seconds:
                del self._entries[key]
                self.misses += 1
                return None
            self.hits += 1
            return data

    def put(self, key: str, data: bytes) -> None:
        if self.max_entries <= 0:
            return
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (self._clock(), data)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def purge_expired(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, (stored_at, _) in self._entries.items()
                       if now - stored_at > self.ttl_seconds]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
