"""
Shared fixtures: isolated data dir + controllable clocks
"""

from pathlib import Path

import pytest

from liveness.store import RecordStore


class FakeClock:
    """
    Callable millisecond clock that only moves when told to
    """

    def __init__(self, start: float = 0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class CountingStore(RecordStore):
    """
    RecordStore that counts writes and can be told to fail them
    """

    def __init__(self, root: Path) -> None:
        super().__init__(root)
        self.writes: list[str] = []
        self.fail_writes = False

    def write(self, name, payload) -> None:
        self.writes.append(name)
        if self.fail_writes:
            raise OSError("disk full")
        super().write(name, payload)


@pytest.fixture
def store(tmp_path: Path) -> CountingStore:
    return CountingStore(tmp_path / "data")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(start=1_000)
