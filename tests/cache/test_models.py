"""Tests for cache data models."""

from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from src.cache._models import CacheEntry, CacheSettings, CacheStats
from src.utils._hashing import cache_key
from tests.cache.conftest import T0


def _entry(ttl: float = 10, usage: int = 1) -> CacheEntry:
    return CacheEntry(
        key=cache_key("q"),
        context="ctx",
        created_at=T0,
        last_accessed_at=T0,
        usage_count=usage,
        expires_at=T0 + timedelta(seconds=ttl),
    )


class TestCacheEntry:
    def test_fresh_until_expiry_inclusive(self) -> None:
        entry = _entry(ttl=10)
        assert entry.is_fresh(T0)
        assert entry.is_fresh(T0 + timedelta(seconds=10))
        assert not entry.is_fresh(T0 + timedelta(seconds=10, microseconds=1))

    def test_zero_ttl_never_fresh(self) -> None:
        assert not _entry(ttl=0).is_fresh(T0)

    def test_expired_strictly_after(self) -> None:
        entry = _entry(ttl=10)
        assert not entry.is_expired(T0 + timedelta(seconds=10))
        assert entry.is_expired(T0 + timedelta(seconds=11))

    def test_key_must_be_sha256_hex_length(self) -> None:
        with pytest.raises(ValidationError):
            CacheEntry(
                key="short",
                context="c",
                created_at=T0,
                last_accessed_at=T0,
                expires_at=T0,
            )

    def test_usage_count_positive(self) -> None:
        with pytest.raises(ValidationError):
            _entry(usage=0)


class TestCacheStats:
    def test_hit_rate_empty(self) -> None:
        assert CacheStats().hit_rate == 0.0

    def test_hit_rate(self) -> None:
        assert CacheStats(hits=3, misses=1).hit_rate == pytest.approx(0.75)


class TestCacheSettings:
    def test_defaults(self) -> None:
        s = CacheSettings()
        assert s.capacity == 1000
        assert s.ttl_seconds == 3600
        assert s.eviction_batch_size == 50
        assert s.janitor_interval_seconds == 3600

    def test_zero_ttl_allowed(self) -> None:
        assert CacheSettings(ttl_seconds=0).ttl_seconds == 0

    @pytest.mark.parametrize("field", ["capacity", "eviction_batch_size"])
    def test_positive_fields(self, field: str) -> None:
        with pytest.raises(ValidationError):
            CacheSettings(**{field: 0})
