"""Shared fixtures for embedding tests."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from src.embedding._models import EmbeddingSettings

DEFAULT_VECTOR = [0.5, 0.25, 0.125]


class ScriptedProvider:
    """Fake provider that replays a per-text script of results.

    Each call for ``text`` pops the next scripted item: exceptions are
    raised, anything else is returned. Once the script runs out the
    ``default`` (or ``DEFAULT_VECTOR``) is returned.
    """

    def __init__(
        self,
        script: dict[str, list[Any]] | None = None,
        *,
        default: Any = None,
        always: BaseException | None = None,
        delays: dict[str, float] | None = None,
        delay: float = 0.0,
    ) -> None:
        self._script = {k: list(v) for k, v in (script or {}).items()}
        self._default = DEFAULT_VECTOR if default is None else default
        self._always = always
        self._delays = delays or {}
        self._delay = delay
        self.calls: list[str] = []
        self.active = 0
        self.max_active = 0
        self.called = asyncio.Event()

    async def embed(self, text: str) -> Any:
        self.calls.append(text)
        self.called.set()
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self._delays.get(text, self._delay))
            if self._always is not None:
                raise self._always
            queue = self._script.get(text)
            item = queue.pop(0) if queue else self._default
            if isinstance(item, BaseException):
                raise item
            return item
        finally:
            self.active -= 1


class SleepRecorder:
    """Drop-in for asyncio.sleep that records delays and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture()
def embedding_settings() -> EmbeddingSettings:
    """Fast settings: small gate, default retry budget."""
    return EmbeddingSettings(concurrency=3, max_retries=3, timeout_seconds=5.0, batch_size=4)


@pytest.fixture()
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()
