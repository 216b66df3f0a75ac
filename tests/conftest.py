"""Shared test fixtures."""

import json
from datetime import UTC, datetime

import pytest

from lazykv import Store, StoreState

WINDOW = 0.05


class FakeClock:
    def __init__(self, start_ms: int = 1_000):
        self._now_ms = start_ms

    def now(self) -> datetime:
        return datetime.fromtimestamp(self._now_ms / 1000, tz=UTC)

    def advance(self, ms: int) -> None:
        self._now_ms += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "data.json"
    path.write_text(json.dumps({"test": "OK", "nested": {"list": [1, 2, 3]}}))
    return path


@pytest.fixture
async def store(data_file):
    s = Store(quiescence_window=WINDOW)
    await s.open(data_file).wait_loaded()
    yield s
    if s.state is StoreState.READY:
        await s.close()

