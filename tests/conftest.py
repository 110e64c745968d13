"""
Pytest configuration and shared fixtures.
"""

import pytest
from datetime import datetime, timedelta
from typing import Dict

from kickahead.config import KickAheadConfig
from kickahead.dispatcher import Dispatcher
from kickahead.job import Job, JobRegistry
from kickahead.logger import get_logger, reset_logger
from kickahead.repository import InMemoryRepository

TICK_INTERVAL = timedelta(minutes=10)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now

    def travel(self, when: datetime) -> datetime:
        self.now = when
        return self.now


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Route the global logger to a temp dir, without console output."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 9, 0, 0))


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def proofs() -> Dict[str, str]:
    """Records what each job run left behind, keyed by its argument."""
    return {}


@pytest.fixture
def registry(proofs) -> JobRegistry:
    """Registry with a job that records proofs, plus a child type inheriting from it."""
    registry = JobRegistry()

    class MyJob(Job):
        def perform(self, x):
            if "FAIL" in x:
                raise RuntimeError(x)
            proofs[x] = "Job done!"

        def out_of_time_hook(self, scheduled_at, x):
            if "HOOK FAIL" in x:
                raise RuntimeError(x)
            proofs[x] = f"Out of time!. Scheduling was: {scheduled_at}"

    class SubJob(MyJob):
        pass

    registry.register("my_job", MyJob)
    registry.register("sub_job", SubJob, parent="my_job")
    return registry


@pytest.fixture
def config(repository, clock) -> KickAheadConfig:
    return KickAheadConfig(tick_interval=TICK_INTERVAL, repository=repository, clock=clock)


@pytest.fixture
def dispatcher(config, registry) -> Dispatcher:
    return Dispatcher(config, registry)
