# placeholder gateway test scripts
from __future__ import annotations

import threading

from state import CATEGORIES, StatsState


def test_unknown_category_is_a_noop(state: StatsState) -> None:
    assert state.append("colours", "red") is None
    assert state.recent("colours", 10) == []
    assert all(len(s) == 0 for s in state.stores.values())


def test_append_uses_state_clock(state: StatsState, clock) -> None:
    rec = state.append("paths", "/img/1/1")
    assert rec.last_seen == clock.now

    clock.advance(250)
    rec = state.append("paths", "/img/1/1")
    assert (rec.count, rec.last_seen) == (2, clock.now)


def test_recent_after_reobserving_old_value(state: StatsState, clock) -> None:
    for path in ("/a", "/b", "/c"):
        state.append("paths", path)
        clock.advance(10)
    state.append("paths", "/b")

    assert state.recent("paths", 10) == ["/b", "/c", "/a"]


def test_hit_buckets_follow_clock(state: StatsState, clock) -> None:
    state.record_hit()
    clock.advance(7000)
    state.record_hit()
    clock.advance(2000)

    assert state.hit_buckets() == [
        {"title": "5s", "count": 1},
        {"title": "10s", "count": 2},
        {"title": "15s", "count": 2},
    ]

    clock.advance(9000)
    assert [b["count"] for b in state.hit_buckets()] == [0, 0, 1]

    clock.advance(10_000)
    assert [b["count"] for b in state.hit_buckets()] == [0, 0, 0]


def test_custom_buckets(clock) -> None:
    state = StatsState(clock=clock, buckets_ms=(1000, 60000))
    state.record_hit(clock.now - 30_000)

    assert state.hit_buckets() == [
        {"title": "1s", "count": 0},
        {"title": "60s", "count": 1},
    ]


def test_reset_clears_everything(state: StatsState) -> None:
    state.append("paths", "/img/10/10")
    state.append("texts", "hi")
    state.append("sizes", {"w": 10, "h": 10})
    state.append("referrers", "https://example.com/")
    state.record_hit()

    state.reset()

    for category in CATEGORIES:
        assert state.recent(category, 10) == []
    assert state.top_sizes(10) == []
    assert state.top_referrers(10) == []
    assert [b["count"] for b in state.hit_buckets()] == [0, 0, 0]

    # counting starts over after a reset
    assert state.append("texts", "hi").count == 1


def test_concurrent_appends_keep_exact_counts(state: StatsState) -> None:
    workers, per_worker = 8, 500

    def hammer():
        for _ in range(per_worker):
            state.append("sizes", {"w": 100, "h": 100})
            state.record_hit()

    threads = [threading.Thread(target=hammer) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert state.top_sizes(10) == [{"w": 100, "h": 100, "n": workers * per_worker}]
    assert len(state.hits) == workers * per_worker
