from datetime import datetime, timedelta, timezone

import pytest
from loguru import logger

from smartgrid.scheduling.scheduler import GridScheduler


T0 = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def tick(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    # CLI tests install sinks bound to captured streams
    logger.remove()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def grid(clock: FakeClock) -> GridScheduler:
    g = GridScheduler(clock=clock)
    g.add_substation("S01", 50.0)
    g.add_substation("S02", 40.0)
    return g
