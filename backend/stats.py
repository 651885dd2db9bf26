# backend/stats.py - read-side projections over value stores and the hit window
import math
import numbers
import operator
from typing import Any, Callable, Dict, Iterable, List, Sequence, TypeVar

from models import StatRecord

T = TypeVar("T")

DEFAULT_BUCKETS_MS = (5000, 10000, 15000)


def as_limit(n: Any) -> int:
    """
    Item count for a limit. Integers (numpy ones too) pass through, finite
    fractional numbers round up. Non-numbers, bools, NaN and infinities give 0.
    """
    if isinstance(n, bool) or not isinstance(n, numbers.Real):
        return 0
    try:
        return operator.index(n)
    except TypeError:
        pass
    n = float(n)
    if not math.isfinite(n):
        return 0
    return math.ceil(n)


def take_first(sequence: Iterable[T], n: Any) -> List[T]:
    """
    First n items of sequence as a new list (fewer if it is shorter).
    A limit that isn't a positive number yields [] rather than the full list.
    """
    n = as_limit(n)
    if n <= 0:
        return []
    out: List[T] = []
    for item in sequence:
        if len(out) >= n:
            break
        out.append(item)
    return out


def order_by_time(records: Sequence[StatRecord]) -> List[StatRecord]:
    # sorted() is stable: equal timestamps keep store order
    return sorted(records, key=lambda r: r.last_seen, reverse=True)


def order_by_count(records: Sequence[StatRecord]) -> List[StatRecord]:
    return sorted(records, key=lambda r: r.count, reverse=True)


def recent(records: Sequence[StatRecord], limit: Any) -> List[Any]:
    return [r.value for r in take_first(order_by_time(records), limit)]


def top_by_count(
    records: Sequence[StatRecord],
    limit: Any,
    project: Callable[[StatRecord], Any] = lambda r: r.value,
) -> List[Any]:
    return [project(r) for r in take_first(order_by_count(records), limit)]


def size_with_count(rec: StatRecord) -> Dict[str, Any]:
    return {**rec.value, "n": rec.count}


def referrer_with_count(rec: StatRecord) -> Dict[str, Any]:
    return {"ref": rec.value, "n": rec.count}


def top_sizes(records: Sequence[StatRecord], limit: Any) -> List[Dict[str, Any]]:
    return top_by_count(records, limit, size_with_count)


def top_referrers(records: Sequence[StatRecord], limit: Any) -> List[Dict[str, Any]]:
    return top_by_count(records, limit, referrer_with_count)


def bucket_title(threshold_ms: int) -> str:
    return f"{threshold_ms / 1000:g}s"


def bucket_counts(
    hits: Iterable[int],
    now: int,
    thresholds_ms: Sequence[int] = DEFAULT_BUCKETS_MS,
) -> List[Dict[str, Any]]:
    """
    Count hits no older than each threshold. Buckets are cumulative: a hit
    2s old lands in 5s, 10s and 15s.

    hits must be newest-first; the scan stops at the first hit older than the
    widest threshold since everything after it is older still.
    """
    thresholds = sorted(thresholds_ms)
    if not thresholds:
        return []
    counts = [0] * len(thresholds)
    widest = thresholds[-1]

    for ts in hits:
        age = now - ts
        if age > widest:
            break
        for i, t in enumerate(thresholds):
            if age <= t:
                counts[i] += 1

    return [{"title": bucket_title(t), "count": c} for t, c in zip(thresholds, counts)]
