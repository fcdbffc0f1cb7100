"""Semantic cache: memoizes retrieval context by normalized query.

Entries are keyed by the SHA-256 of the normalized query text, live for a
fixed TTL that reads never extend, and are evicted least-frequently-used
first when a new key would exceed capacity.

One asyncio.Lock guards the whole lookup -> compute -> write sequence, so a
given query is computed at most once at a time. The price is that unrelated
queries also wait for each other while a compute is running.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from src.cache._exceptions import CacheError
from src.cache._models import CacheEntry, CacheSettings, CacheStats
from src.utils._hashing import cache_key
from src.utils._logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_log = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class SemanticCache:
    """In-memory LFU + TTL memo store for retrieval context strings."""

    def __init__(
        self,
        settings: CacheSettings | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._settings = settings or CacheSettings()
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()
        self._stats = CacheStats(capacity=self._settings.capacity)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def settings(self) -> CacheSettings:
        return self._settings

    @property
    def stats(self) -> CacheStats:
        """Snapshot of the cache counters."""
        return self._stats.model_copy(update={"size": len(self._entries)})

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, query: object) -> bool:
        return isinstance(query, str) and cache_key(query) in self._entries

    def peek(self, query: str) -> CacheEntry | None:
        """Return a copy of the entry for ``query`` without counting a use."""
        entry = self._entries.get(cache_key(query))
        return entry.model_copy() if entry is not None else None

    async def get_or_compute(
        self,
        query: str,
        compute: Callable[[], Awaitable[str]],
    ) -> str:
        """Return cached context for ``query``, computing and storing it on a miss.

        On a hit the usage counter is incremented and ``compute`` is not
        called. On a miss or an expired entry ``compute`` is awaited while the
        cache lock is held; if it raises, nothing is stored and the error
        propagates.

        Raises:
            CacheError: If ``compute`` returns something other than a string.
        """
        key = cache_key(query)

        async with self._lock:
            now = self._clock()
            entry = self._entries.get(key)

            if entry is not None and entry.is_fresh(now):
                entry.usage_count += 1
                entry.last_accessed_at = now
                self._stats.hits += 1
                _log.info("cache_hit", key=key[:12], usage_count=entry.usage_count)
                return entry.context

            if entry is not None:
                self._stats.expired += 1
                _log.info("cache_expired", key=key[:12], expires_at=entry.expires_at.isoformat())
            else:
                _log.info("cache_miss", key=key[:12])
            self._stats.misses += 1

            context = await compute()
            if not isinstance(context, str):
                msg = f"Cache compute must return str, got {type(context).__name__}"
                raise CacheError(msg)

            # Re-read the clock: compute may have taken a while.
            self._store(key, context, self._clock())
            return context

    async def purge_expired(self) -> int:
        """Remove every entry whose expiry lies in the past.

        Returns:
            Number of entries removed.
        """
        async with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
            self._stats.swept += len(expired)

        if expired:
            _log.info("cache_swept", count=len(expired), remaining=len(self._entries))
        return len(expired)

    async def invalidate(self, query: str) -> bool:
        """Drop the entry for ``query``. Returns True if one existed."""
        key = cache_key(query)
        async with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            _log.info("cache_invalidated", key=key[:12])
        return removed

    async def clear(self) -> int:
        """Delete all entries. Returns the number deleted."""
        async with self._lock:
            count = len(self._entries)
            self._entries.clear()
        _log.info("cache_cleared", count=count)
        return count

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _store(self, key: str, context: str, now: datetime) -> None:
        """Upsert under the lock: overwrite in place, or evict then insert."""
        expires_at = now + timedelta(seconds=self._settings.ttl_seconds)
        existing = self._entries.get(key)

        if existing is not None:
            existing.context = context
            existing.created_at = now
            existing.last_accessed_at = now
            existing.expires_at = expires_at
            existing.usage_count += 1
            return

        if len(self._entries) >= self._settings.capacity:
            self._evict()

        self._entries[key] = CacheEntry(
            key=key,
            context=context,
            created_at=now,
            last_accessed_at=now,
            usage_count=1,
            expires_at=expires_at,
        )

    def _evict(self) -> None:
        """Remove a batch of the least-used, oldest entries."""
        batch = min(self._settings.eviction_batch_size, len(self._entries))
        if batch <= 0:
            return

        victims = sorted(
            self._entries.values(),
            key=lambda e: (e.usage_count, e.created_at),
        )[:batch]
        for victim in victims:
            del self._entries[victim.key]

        self._stats.evictions += len(victims)
        _log.warning(
            "cache_evicted",
            count=len(victims),
            capacity=self._settings.capacity,
            min_usage=victims[0].usage_count,
            max_usage=victims[-1].usage_count,
        )
