"""HybridSearchEngine: concurrent vector + keyword search with rank fusion."""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

from src.retrieval._exceptions import RetrievalFailedError
from src.retrieval._fusion import ReciprocalRankFusion, WeightedScoreFusion
from src.retrieval._models import (
    FusionMode,
    HybridSearchResult,
    Origin,
    ScoredChunk,
    SearchSettings,
)
from src.retrieval._searchers import KeywordSearcher, VectorSearcher
from src.utils._logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from src.embedding._client import EmbeddingClient
    from src.retrieval._models import FusedChunk
    from src.retrieval._store import ChunkStore

_log = get_logger(__name__)


class HybridSearchEngine:
    """Runs both search legs concurrently and fuses their ranked lists.

    A failing leg is logged and dropped (fail-soft); only when both legs
    fail does ``search`` raise ``RetrievalFailedError``.
    """

    def __init__(
        self,
        store: ChunkStore,
        embedder: EmbeddingClient,
        settings: SearchSettings | None = None,
    ) -> None:
        self._settings = settings or SearchSettings()

        # Search legs
        self._vector = VectorSearcher(store, embedder, self._settings.similarity_metric)
        self._keyword = KeywordSearcher(store)

        # Fusion strategies
        self._rrf = ReciprocalRankFusion(k=self._settings.rrf_constant)
        self._weighted = WeightedScoreFusion(self._settings.fusion_weights)

    @property
    def settings(self) -> SearchSettings:
        return self._settings

    async def search(
        self,
        query: str,
        k: int | None = None,
        *,
        mode: FusionMode | None = None,
        weights: tuple[float, float] | None = None,
    ) -> list[FusedChunk]:
        """Return at most ``k`` fused chunks, best first."""
        result = await self.search_detailed(query, k, mode=mode, weights=weights)
        return result.chunks

    async def search_detailed(
        self,
        query: str,
        k: int | None = None,
        *,
        mode: FusionMode | None = None,
        weights: tuple[float, float] | None = None,
    ) -> HybridSearchResult:
        """Search and also report which legs succeeded and how long they took.

        Args:
            query: Raw query text.
            k: Result count; defaults to ``settings.top_k``.
            mode: Fusion strategy; defaults to ``settings.fusion_mode``.
            weights: (vector, keyword) weights for weighted fusion; defaults
                to ``settings.fusion_weights``.

        Raises:
            RetrievalFailedError: If both legs failed.
        """
        top_k = self._settings.top_k if k is None else k
        mode = FusionMode(mode or self._settings.fusion_mode)
        result = HybridSearchResult(query_text=query, mode=mode)
        if top_k <= 0:
            return result

        timings: dict[str, float] = {}
        t0 = time.monotonic()
        outcomes = await asyncio.gather(
            self._timed(self._vector.search(query, top_k), "vector_ms", timings),
            self._timed(self._keyword.search(query, top_k), "keyword_ms", timings),
            return_exceptions=True,
        )
        timings["legs_ms"] = (time.monotonic() - t0) * 1000

        channel_results: dict[Origin, list[ScoredChunk]] = {}
        last_exc: BaseException | None = None
        for origin, outcome in zip((Origin.VECTOR, Origin.KEYWORD), outcomes, strict=True):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                last_exc = outcome
                _log.warning(f"{origin}_leg_failed", error=str(outcome))
                result.errors.append(f"{origin.capitalize()} search failed: {outcome}")
                continue
            channel_results[origin] = outcome

        if not channel_results:
            msg = f"Both search legs failed for query: {query[:80]!r}"
            raise RetrievalFailedError(msg) from last_exc

        result.legs_used = list(channel_results)

        t0 = time.monotonic()
        if mode == FusionMode.WEIGHTED:
            result.chunks = self._weighted.fuse(channel_results, top_k=top_k, weights=weights)
        else:
            result.chunks = self._rrf.fuse(channel_results, top_k=top_k)
        timings["fusion_ms"] = (time.monotonic() - t0) * 1000
        result.timings = timings

        _log.info(
            "hybrid_search_complete",
            mode=mode,
            legs=result.legs_used,
            results=len(result.chunks),
            elapsed_ms=timings["legs_ms"] + timings["fusion_ms"],
        )
        return result

    @staticmethod
    async def _timed(
        coro: Awaitable[list[ScoredChunk]],
        label: str,
        timings: dict[str, float],
    ) -> list[ScoredChunk]:
        t0 = time.monotonic()
        try:
            return await coro
        finally:
            timings[label] = (time.monotonic() - t0) * 1000
