# backend/state.py - process-wide aggregation state + reset, handed to routes via Depends
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

from fastapi import Request

import stats
from models import HitWindow, StatRecord, ValueStore, now_ms

CATEGORIES = ("paths", "texts", "sizes", "referrers")


class StatsState:
    """
    Owns the four value stores and the hit window.

    Routes run on a thread pool, so every read-modify-write and every snapshot
    goes through self.lock. Nothing here blocks on I/O.
    """

    def __init__(
        self,
        clock: Callable[[], int] = now_ms,
        buckets_ms: Sequence[int] = stats.DEFAULT_BUCKETS_MS,
    ):
        self.clock = clock
        self.buckets_ms = tuple(buckets_ms)
        self.lock = threading.Lock()
        self.stores: Dict[str, ValueStore] = {}
        self.hits = HitWindow()
        self._fresh()

    def _fresh(self):
        self.stores = {name: ValueStore(name) for name in CATEGORIES}
        self.hits = HitWindow()

    # --- write side ---
    def append(self, category: str, value: Any) -> Optional[StatRecord]:
        with self.lock:
            store = self.stores.get(category)
            if store is None:
                return None
            return store.append(value, self.clock())

    def record_hit(self, now: Optional[int] = None) -> int:
        with self.lock:
            return self.hits.record(now if now is not None else self.clock())

    def reset(self):
        with self.lock:
            self._fresh()

    # --- read side ---
    def snapshot(self, category: str) -> List[StatRecord]:
        with self.lock:
            store = self.stores.get(category)
            return store.snapshot() if store is not None else []

    def recent(self, category: str, limit: Any) -> List[Any]:
        return stats.recent(self.snapshot(category), limit)

    def top_sizes(self, limit: Any) -> List[Dict[str, Any]]:
        return stats.top_sizes(self.snapshot("sizes"), limit)

    def top_referrers(self, limit: Any) -> List[Dict[str, Any]]:
        return stats.top_referrers(self.snapshot("referrers"), limit)

    def hit_buckets(self, now: Optional[int] = None) -> List[Dict[str, Any]]:
        now = now if now is not None else self.clock()
        # scan the live window: the early exit keeps this short
        with self.lock:
            return stats.bucket_counts(self.hits, now, self.buckets_ms)


def get_stats(request: Request) -> StatsState:
    return request.app.state.stats
