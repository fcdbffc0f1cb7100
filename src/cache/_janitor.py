"""Background sweeper that purges expired cache entries on an interval."""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING, Any

from src.utils._logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from src.cache._cache import SemanticCache

_log = get_logger(__name__)


class CacheJanitor:
    """Periodically calls ``SemanticCache.purge_expired``.

    Sweeps share the cache's lock, so they are safe alongside foreground
    ``get_or_compute`` calls. A failed sweep is logged and the loop keeps
    running.

    Usage::

        async with CacheJanitor(cache, interval_seconds=3600):
            ...
    """

    def __init__(
        self,
        cache: SemanticCache,
        interval_seconds: float | None = None,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._cache = cache
        self._interval = (
            interval_seconds
            if interval_seconds is not None
            else cache.settings.janitor_interval_seconds
        )
        if self._interval <= 0:
            msg = "interval_seconds must be positive"
            raise ValueError(msg)
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None
        self._sweeps = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def sweeps(self) -> int:
        """Completed sweep count, successful or not."""
        return self._sweeps

    async def sweep(self) -> int:
        """Run one sweep now. Returns the number of entries removed."""
        removed = await self._cache.purge_expired()
        _log.debug("janitor_sweep", removed=removed, remaining=len(self._cache))
        return removed

    def start(self) -> None:
        """Start the sweep loop on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="cache-janitor")
        _log.info("janitor_started", interval_s=self._interval)

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        _log.info("janitor_stopped", sweeps=self._sweeps)

    async def __aenter__(self) -> CacheJanitor:
        self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.stop()

    async def _run(self) -> None:
        while True:
            try:
                await self.sweep()
            except Exception:
                _log.exception("janitor_sweep_failed")
            self._sweeps += 1
            await self._sleep(self._interval)
