# backend/models.py - in-memory records: stat records, value stores, hit window
import time
from collections import deque
from typing import Any, Deque, Dict, Hashable, Iterator, List, Optional


def now_ms() -> int:
    return int(time.time() * 1000)


def freeze(value: Any) -> Hashable:
    """
    Canonical hashable form of a payload, used as the lookup key of a store.
    Mappings are compared by content regardless of key order, lists and tuples
    by content in order (a list never equals a tuple, as with ==).
    Raises TypeError for payloads that can't be frozen.
    """
    if isinstance(value, dict):
        return ("__map__", frozenset((k, freeze(v)) for k, v in value.items()))
    if isinstance(value, list):
        return ("__list__", tuple(freeze(v) for v in value))
    if isinstance(value, tuple):
        return ("__tuple__", tuple(freeze(v) for v in value))
    hash(value)
    return value


class StatRecord:
    """A deduplicated observation: value + how many times + when last seen."""

    __slots__ = ("value", "count", "last_seen")

    def __init__(self, value: Any, now: Optional[int] = None):
        self.value = value
        self.count = 1
        self.last_seen = now if now is not None else now_ms()

    def touch(self, now: Optional[int] = None):
        self.count += 1
        self.last_seen = now if now is not None else now_ms()

    def copy(self) -> "StatRecord":
        dup = StatRecord(self.value, self.last_seen)
        dup.count = self.count
        return dup

    def __repr__(self):
        return f"StatRecord(value={self.value!r}, count={self.count}, last_seen={self.last_seen})"


class ValueStore:
    """
    Per-category collection of StatRecords.
    Iteration order is newest-created first; re-observed values keep their slot.
    """

    def __init__(self, name: str):
        self.name = name
        # newest record at index 0; see snapshot()
        self._records: Deque[StatRecord] = deque()
        self._index: Dict[Hashable, StatRecord] = {}
        # payloads that couldn't be frozen, matched with plain ==
        self._loose: List[StatRecord] = []

    def __len__(self):
        return len(self._records)

    def __iter__(self) -> Iterator[StatRecord]:
        return iter(self.snapshot())

    def find(self, value: Any) -> Optional[StatRecord]:
        try:
            key = freeze(value)
        except TypeError:
            for rec in self._loose:
                if rec.value == value:
                    return rec
            return None
        return self._index.get(key)

    def append(self, value: Any, now: Optional[int] = None) -> StatRecord:
        now = now if now is not None else now_ms()
        rec = self.find(value)
        if rec is not None:
            rec.touch(now)
            return rec

        rec = StatRecord(value, now)
        try:
            self._index[freeze(value)] = rec
        except TypeError:
            self._loose.append(rec)
        self._records.appendleft(rec)
        return rec

    def snapshot(self) -> List[StatRecord]:
        # copies, so callers can sort them after the lock is released
        return [r.copy() for r in self._records]

    def clear(self):
        self._records = deque()
        self._index = {}
        self._loose = []


class HitWindow:
    """Newest-first timestamps (epoch ms) of every served image request."""

    def __init__(self):
        self._hits: Deque[int] = deque()

    def __len__(self):
        return len(self._hits)

    def __iter__(self) -> Iterator[int]:
        # newest first; callers scanning live must hold the state lock
        return iter(self._hits)

    def record(self, now: Optional[int] = None) -> int:
        ts = now if now is not None else now_ms()
        self._hits.appendleft(ts)
        return ts

    def snapshot(self) -> List[int]:
        return list(self._hits)

    def clear(self):
        self._hits = deque()
