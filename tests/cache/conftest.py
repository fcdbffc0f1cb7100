"""Shared fixtures for cache tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from src.cache._cache import SemanticCache
from src.cache._models import CacheSettings

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class CountingCompute:
    """Async compute callback that records how often it ran."""

    def __init__(self, result: str = "context") -> None:
        self.result = result
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        return self.result


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache_settings() -> CacheSettings:
    return CacheSettings(capacity=4, ttl_seconds=10, eviction_batch_size=2)


@pytest.fixture()
def cache(cache_settings: CacheSettings, clock: FakeClock) -> SemanticCache:
    return SemanticCache(cache_settings, clock=clock)
