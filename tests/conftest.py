# placeholder gateway test scripts
from __future__ import annotations

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
# backend modules import their siblings directly, as under `uvicorn main:app`
for sub in ("backend", "simulator"):
    p = str(REPO_ROOT / sub)
    if p not in sys.path:
        sys.path.insert(0, p)


class FakeClock:
    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def state(clock: FakeClock):
    from state import StatsState

    return StatsState(clock=clock)


@pytest.fixture()
def client(state):
    from fastapi.testclient import TestClient

    import main

    previous = main.app.state.stats
    main.app.state.stats = state
    try:
        yield TestClient(main.app)
    finally:
        main.app.state.stats = previous
