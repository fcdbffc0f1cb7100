"""EmbeddingClient: bounded-concurrency, retrying, streaming embedding calls.

Every provider call passes through one admission gate (an asyncio.Semaphore),
so at most ``concurrency`` calls are in flight no matter how many batches are
being processed. Transient failures are retried with exponential backoff;
anything else fails the single text without disturbing its siblings.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable
from typing import TYPE_CHECKING, Any

import aiohttp
import numpy as np
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.embedding._exceptions import (
    EmbeddingError,
    EmbeddingProviderError,
    EmbeddingRetryExhaustedError,
    MalformedEmbeddingResponseError,
    TransientEmbeddingError,
)
from src.embedding._models import EmbeddedText, EmbeddingSettings
from src.utils._logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable, Iterable

    from tenacity import RetryCallState

    from src.embedding._provider import EmbeddingProvider

_log = get_logger(__name__)

TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    TimeoutError,
    ConnectionError,
    aiohttp.ClientError,
    TransientEmbeddingError,
)


class EmbeddingClient:
    """Wraps an EmbeddingProvider with an admission gate, retries and timeouts."""

    def __init__(
        self,
        provider: EmbeddingProvider,
        settings: EmbeddingSettings | None = None,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._provider = provider
        self._settings = settings or EmbeddingSettings()
        self._gate = asyncio.Semaphore(self._settings.concurrency)
        self._sleep = sleep
        self._in_flight = 0

    @property
    def settings(self) -> EmbeddingSettings:
        return self._settings

    @property
    def in_flight(self) -> int:
        """Provider calls currently holding a gate permit."""
        return self._in_flight

    # ------------------------------------------------------------------
    # Single text
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> list[float]:
        """Embed one text, retrying transient failures.

        Raises:
            EmbeddingRetryExhaustedError: Transient failures outlasted max_retries.
            MalformedEmbeddingResponseError: Provider returned an unusable vector.
            EmbeddingProviderError: Any other provider failure.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._settings.max_retries + 1),
            wait=wait_exponential(
                multiplier=self._settings.backoff_base_seconds,
                max=self._settings.backoff_max_seconds,
            ),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    raw = await self._call_provider(text)
        except TRANSIENT_ERRORS as exc:
            msg = f"Embedding failed after {self._settings.max_retries} retries: {exc!r}"
            raise EmbeddingRetryExhaustedError(msg) from exc
        except EmbeddingError:
            raise
        except Exception as exc:
            msg = f"Embedding provider call failed: {exc!r}"
            raise EmbeddingProviderError(msg) from exc

        return self._validate_vector(raw)

    # ------------------------------------------------------------------
    # Batches and streams
    # ------------------------------------------------------------------

    async def embed_batch(self, texts: Iterable[str]) -> AsyncIterator[EmbeddedText]:
        """Embed texts concurrently, yielding pairs in completion order.

        Texts that fail are logged and omitted; they never abort the batch.
        Closing the generator early cancels the remaining in-flight work.
        """
        batch = list(texts)
        if not batch:
            return

        _log.info("embedding_batch_start", count=len(batch))
        queue: asyncio.Queue[EmbeddedText | None] = asyncio.Queue(
            maxsize=self._settings.batch_size,
        )

        async def _worker(text: str) -> None:
            try:
                vector = await self.embed(text)
            except Exception as exc:
                _log.warning(
                    "embedding_dropped",
                    error_type=type(exc).__name__,
                    error=str(exc),
                    chars=len(text),
                )
                await queue.put(None)
                return
            await queue.put(EmbeddedText(text=text, vector=vector))

        tasks = [asyncio.create_task(_worker(text)) for text in batch]
        delivered = 0
        try:
            for _ in range(len(tasks)):
                item = await queue.get()
                if item is not None:
                    delivered += 1
                    yield item
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            _log.info(
                "embedding_batch_complete",
                count=len(batch),
                delivered=delivered,
            )

    async def embed_stream(
        self,
        texts: Iterable[str] | AsyncIterable[str],
    ) -> AsyncIterator[EmbeddedText]:
        """Chunk a (possibly async) stream into batches and embed each batch."""
        batch: list[str] = []
        async for text in _iterate(texts):
            batch.append(text)
            if len(batch) >= self._settings.batch_size:
                async for item in self.embed_batch(batch):
                    yield item
                batch = []

        if batch:
            async for item in self.embed_batch(batch):
                yield item

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _call_provider(self, text: str) -> Any:
        """One provider call under the admission gate and per-call timeout."""
        async with self._gate:
            self._in_flight += 1
            try:
                return await asyncio.wait_for(
                    self._provider.embed(text),
                    timeout=self._settings.timeout_seconds,
                )
            finally:
                self._in_flight -= 1

    def _validate_vector(self, raw: Any) -> list[float]:
        try:
            arr = np.asarray(raw, dtype=np.float32)
        except (TypeError, ValueError, OverflowError) as exc:
            msg = f"Embedding is not numeric: {exc}"
            raise MalformedEmbeddingResponseError(msg) from exc

        if arr.ndim != 1 or arr.size == 0:
            msg = f"Embedding must be a non-empty 1-d vector, got shape {arr.shape}"
            raise MalformedEmbeddingResponseError(msg)
        if not np.all(np.isfinite(arr)):
            msg = "Embedding contains NaN or infinite values"
            raise MalformedEmbeddingResponseError(msg)

        expected = self._settings.embedding_dim
        if expected is not None and arr.size != expected:
            msg = f"Embedding dimension {arr.size} != expected {expected}"
            raise MalformedEmbeddingResponseError(msg)

        return arr.tolist()

    def _log_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        _log.warning(
            "embedding_retry",
            attempt=retry_state.attempt_number,
            max_retries=self._settings.max_retries,
            delay_s=retry_state.next_action.sleep if retry_state.next_action else None,
            error=repr(exc),
        )


async def _iterate(texts: Iterable[str] | AsyncIterable[str]) -> AsyncIterator[str]:
    if isinstance(texts, AsyncIterable):
        async for text in texts:
            yield text
    else:
        for text in texts:
            yield text
