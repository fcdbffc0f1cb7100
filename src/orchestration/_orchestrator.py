"""RetrievalOrchestrator: the engine's top-level facade.

Normalizes the query, serves it from the semantic cache when possible, and
otherwise runs a weighted hybrid search, compresses the hits and stores the
assembled context for next time.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any

from src.cache._cache import SemanticCache
from src.cache._janitor import CacheJanitor
from src.embedding._client import EmbeddingClient
from src.orchestration._compressor import ContextCompressor
from src.orchestration._metrics import MetricsCollector
from src.orchestration._models import EngineSettings
from src.retrieval._engine import HybridSearchEngine
from src.retrieval._models import FusionMode
from src.utils._exceptions import RAGEngineError, ValidationError
from src.utils._hashing import normalize_query
from src.utils._logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from src.embedding._provider import EmbeddingProvider
    from src.orchestration._models import RetrievalStats
    from src.retrieval._store import ChunkStore

_log = get_logger(__name__)


class RetrievalOrchestrator:
    """Cache-first retrieval of assembled context strings."""

    def __init__(
        self,
        search_engine: HybridSearchEngine,
        cache: SemanticCache,
        settings: EngineSettings | None = None,
        *,
        compressor: ContextCompressor | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._settings = settings or EngineSettings()
        self._search = search_engine
        self._cache = cache
        self._compressor = compressor or ContextCompressor(
            max_chars=self._settings.compression_max_chars,
            marker=self._settings.compression_marker,
            separator=self._settings.context_separator,
        )
        self._metrics = metrics or MetricsCollector()

    @classmethod
    def from_settings(
        cls,
        settings: EngineSettings,
        *,
        provider: EmbeddingProvider,
        store: ChunkStore,
        metrics: MetricsCollector | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> RetrievalOrchestrator:
        """Wire embedding client, search engine and cache from one options map."""
        embedder = EmbeddingClient(provider, settings.to_embedding_settings(), sleep=sleep)
        engine = HybridSearchEngine(store, embedder, settings.to_search_settings())
        cache = SemanticCache(settings.to_cache_settings())
        return cls(engine, cache, settings, metrics=metrics)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def cache(self) -> SemanticCache:
        return self._cache

    @property
    def search_engine(self) -> HybridSearchEngine:
        return self._search

    @property
    def stats(self) -> RetrievalStats:
        return self._metrics.snapshot()

    def create_janitor(self, interval_seconds: float | None = None) -> CacheJanitor:
        """A janitor bound to this orchestrator's cache (not started)."""
        return CacheJanitor(self._cache, interval_seconds)

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    async def retrieve(self, query: str) -> str:
        """Return assembled context for ``query``.

        Raises:
            ValidationError: If the query is empty after normalization.
            RetrievalFailedError: If both search legs failed on a cache miss.
        """
        normalized = normalize_query(query)
        if not normalized:
            msg = "Query must not be empty"
            raise ValidationError(msg)

        computed = False

        async def _compute() -> str:
            nonlocal computed
            computed = True
            return await self._fetch_and_compress(normalized)

        t0 = time.monotonic()
        try:
            context = await self._cache.get_or_compute(normalized, _compute)
        except RAGEngineError as exc:
            latency_ms = (time.monotonic() - t0) * 1000
            self._metrics.record_failure(latency_ms=latency_ms)
            _log.warning("retrieve_failed", error=str(exc), elapsed_ms=latency_ms)
            raise

        latency_ms = (time.monotonic() - t0) * 1000
        self._metrics.record_query(latency_ms=latency_ms, cache_hit=not computed)
        _log.info(
            "retrieve_complete",
            cache_hit=not computed,
            context_chars=len(context),
            elapsed_ms=latency_ms,
        )
        return context

    async def retrieve_batch(self, queries: Iterable[str]) -> dict[str, str]:
        """Resolve many queries, each distinct normalized query once.

        Returns:
            Mapping from every original query string to its context. The
            first failure propagates once all queries have settled.
        """
        groups: dict[str, list[str]] = {}
        for query in queries:
            groups.setdefault(normalize_query(query), []).append(query)

        unique = list(groups)
        _log.info(
            "retrieve_batch_start",
            queries=sum(len(originals) for originals in groups.values()),
            unique=len(unique),
        )

        outcomes = await asyncio.gather(
            *(self.retrieve(q) for q in unique),
            return_exceptions=True,
        )

        results: dict[str, str] = {}
        first_error: BaseException | None = None
        for normalized, outcome in zip(unique, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                first_error = first_error or outcome
                continue
            for original in groups[normalized]:
                results[original] = outcome

        if first_error is not None:
            raise first_error
        return results

    async def _fetch_and_compress(self, query: str) -> str:
        chunks = await self._search.search(
            query,
            k=self._settings.search_top_k,
            mode=FusionMode.WEIGHTED,
            weights=self._settings.fusion_weights,
        )
        return self._compressor.assemble(chunks)
