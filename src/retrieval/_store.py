"""Chunk store collaborators.

The search engine only needs ``scan_all()``. Stores that can rank by vector
similarity natively also implement ``similarity_search()``, and the vector leg
prefers it over a full scan.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

from src.retrieval._models import SimilarityMetric
from src.retrieval._similarity import get_scorer

if TYPE_CHECKING:
    from collections.abc import Iterable

    from src.retrieval._models import Chunk


@runtime_checkable
class ChunkStore(Protocol):
    """Read-only source of indexed chunks."""

    async def scan_all(self) -> list[Chunk]: ...


@runtime_checkable
class SupportsSimilaritySearch(Protocol):
    """A store that can rank chunks against a query vector itself."""

    async def similarity_search(
        self,
        vector: list[float],
        k: int,
        metric: SimilarityMetric = SimilarityMetric.COSINE,
    ) -> list[tuple[Chunk, float]]: ...


class InMemoryChunkStore:
    """List-backed store with a cached numpy embedding matrix per dimension."""

    def __init__(self, chunks: Iterable[Chunk] = ()) -> None:
        self._chunks: list[Chunk] = list(chunks)
        self._matrices: dict[int, tuple[list[Chunk], np.ndarray]] = {}

    def __len__(self) -> int:
        return len(self._chunks)

    async def scan_all(self) -> list[Chunk]:
        return list(self._chunks)

    async def similarity_search(
        self,
        vector: list[float],
        k: int,
        metric: SimilarityMetric = SimilarityMetric.COSINE,
    ) -> list[tuple[Chunk, float]]:
        """Top-k chunks by similarity; chunks of another dimension are skipped."""
        if k <= 0 or not vector:
            return []

        candidates, matrix = self._matrix_for(len(vector))
        if not candidates:
            return []

        query = np.asarray(vector, dtype=np.float64)
        scores = get_scorer(metric)(query, matrix)
        order = sorted(
            range(len(candidates)),
            key=lambda i: (-float(scores[i]), candidates[i].id),
        )
        return [(candidates[i], float(scores[i])) for i in order[:k]]

    def _matrix_for(self, dim: int) -> tuple[list[Chunk], np.ndarray]:
        if dim not in self._matrices:
            candidates = [c for c in self._chunks if len(c.embedding) == dim]
            matrix = np.asarray(
                [c.embedding for c in candidates],
                dtype=np.float64,
            ).reshape(len(candidates), dim)
            self._matrices[dim] = (candidates, matrix)
        return self._matrices[dim]
