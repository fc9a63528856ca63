"""
snapshot_cache.py - read-through copy of the full dataset snapshot
Serves the dashboard reads. Dropped after every mutation and after a short TTL,
so the store stays the only source of truth. Export never goes through here.
"""

import copy
import threading
import time

from stores.base import CheckinStore


class SnapshotCache:
    """In-memory snapshot cache with TTL and hit tracking."""

    def __init__(self, store: CheckinStore, ttl_seconds: int = 30):
        self.store = store
        self.ttl_seconds = ttl_seconds
        self._snapshot: dict | None = None
        self._timestamp: float = 0.0
        self._generation: int = 0
        self._lock = threading.Lock()
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    def get(self) -> dict[str, dict]:
        """Return the cached snapshot, fetching it from the store on a miss or expiry."""
        with self._lock:
            fresh = self._snapshot is not None and (time.time() - self._timestamp) <= self.ttl_seconds
            if fresh:
                self._hits += 1
                return copy.deepcopy(self._snapshot)
            self._misses += 1
            generation = self._generation

        snapshot = self.store.export_snapshot()

        with self._lock:
            # an invalidate() that ran during the fetch wins; don't keep stale data
            if generation == self._generation and self.ttl_seconds > 0:
                self._snapshot = snapshot
                self._timestamp = time.time()
        return copy.deepcopy(snapshot)

    # ------------------------------------------------------------------
    def invalidate(self) -> None:
        with self._lock:
            self._snapshot = None
            self._generation += 1

    # ------------------------------------------------------------------
    def stats(self) -> dict:
        with self._lock:
            hits, misses, cached = self._hits, self._misses, self._snapshot is not None
        total = hits + misses
        return {
            "cached": cached,
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / total, 3) if total else 0.0,
        }
