"""Data models for the semantic cache: entries, counters and settings."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, Field


class CacheEntry(BaseModel):
    """One memoized retrieval context, keyed by the normalized query hash."""

    key: str = Field(min_length=64, max_length=64)
    context: str
    created_at: datetime
    last_accessed_at: datetime
    usage_count: int = Field(default=1, ge=1)
    expires_at: datetime

    def is_fresh(self, now: datetime) -> bool:
        """True while the entry may be served.

        An entry whose expiry does not lie after its creation (ttl=0) is
        never fresh.
        """
        return self.expires_at > self.created_at and now <= self.expires_at

    def is_expired(self, now: datetime) -> bool:
        """True once the janitor may remove the entry."""
        return self.expires_at < now


class CacheStats(BaseModel):
    """Point-in-time cache counters."""

    hits: int = 0
    misses: int = 0
    expired: int = 0
    evictions: int = 0
    swept: int = 0
    size: int = 0
    capacity: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


class CacheSettings(BaseModel):
    """Capacity, TTL and eviction settings for SemanticCache."""

    capacity: int = Field(default=1000, gt=0)
    ttl_seconds: int = Field(default=3600, ge=0)
    eviction_batch_size: int = Field(default=50, gt=0)
    janitor_interval_seconds: float = Field(default=3600.0, gt=0)
