"""
Ephemeral clearance cache.

Holds only "clean" verdicts, each with an expiry. Entries are expired
lazily on read; ``purge_expired`` can be called to reclaim memory. The
cache may be cleared at any time: it only saves remote API calls.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Optional

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClearanceEntry:
    expires_at: float


class ClearanceCache:
    """
    Thread-safe, capacity-bounded TTL cache of clean address ids.

    Least recently used entries are evicted once ``max_entries`` is reached.
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")

        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, ClearanceEntry]" = OrderedDict()
        self._lock = threading.Lock()

        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: str) -> bool:
        """Return True if ``key`` holds a live clean verdict."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return False

            if self._clock() >= entry.expires_at:
                del self._entries[key]
                self.misses += 1
                return False

            self._entries.move_to_end(key)
            self.hits += 1
            return True

    def put(self, key: str, ttl_seconds: Optional[float] = None) -> None:
        """Store a clean verdict for ``key`` with a fresh expiry."""
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._entries[key] = ClearanceEntry(expires_at=self._clock() + ttl)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self.evictions += 1
                LOGGER.debug("Evicted clearance entry %s", evicted)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
            for key in expired:
                del self._entries[key]

        if expired:
            LOGGER.debug("Purged %d expired clearance entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "size": len(self._entries),
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["ClearanceCache", "ClearanceEntry"]
