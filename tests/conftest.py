"""Shared test fixtures and marker registration."""

from __future__ import annotations

import pytest

from remote_state._reconciler import Reconciler
from tests.fake_provider import FakeProvider


def pytest_configure(config: object) -> None:
    """Register custom markers."""
    if isinstance(config, pytest.Config):
        config.addinivalue_line("markers", "integration: requires external services")


class SleepRecorder:
    """Stand-in for ``time.sleep`` that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def reconciler(provider: FakeProvider, sleeps: SleepRecorder) -> Reconciler:
    return Reconciler(provider, sleep=sleeps)
