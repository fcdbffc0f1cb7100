"""Searcher classes for the two hybrid search legs.

- VectorSearcher: embeds the query and ranks chunks by vector similarity
- KeywordSearcher: ranks chunks by case-insensitive query-term counts
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.embedding._exceptions import EmbeddingError
from src.retrieval._exceptions import ChunkStoreError, SearchError
from src.retrieval._models import Origin, ScoredChunk, SimilarityMetric
from src.retrieval._similarity import score_vectors
from src.retrieval._store import SupportsSimilaritySearch
from src.utils._logging import get_logger

if TYPE_CHECKING:
    from src.embedding._client import EmbeddingClient
    from src.retrieval._models import Chunk
    from src.retrieval._store import ChunkStore

_log = get_logger(__name__)

# --- Common helpers ---


def count_occurrences(text: str, term: str) -> int:
    """Non-overlapping, case-insensitive occurrences of ``term`` in ``text``."""
    if not term:
        return 0
    return text.casefold().count(term.casefold())


def keyword_score(text: str, terms: list[str]) -> int:
    """Sum of occurrence counts over all query terms."""
    return sum(count_occurrences(text, term) for term in terms)


def rank_top_k(
    pairs: list[tuple[Chunk, float]],
    k: int,
    origin: Origin,
) -> list[ScoredChunk]:
    """Sort by score descending (chunk id breaks ties) and keep ``k``."""
    ordered = sorted(pairs, key=lambda p: (-p[1], p[0].id))
    return [ScoredChunk(chunk=c, score=s, origin=origin) for c, s in ordered[:k]]


async def _scan(store: ChunkStore) -> list[Chunk]:
    try:
        return await store.scan_all()
    except Exception as exc:
        msg = f"Chunk store scan failed: {exc}"
        raise ChunkStoreError(msg) from exc


# ---------------------------------------------------------------------------
# VectorSearcher
# ---------------------------------------------------------------------------


class VectorSearcher:
    """Embed the query, then rank chunks by similarity to it."""

    def __init__(
        self,
        store: ChunkStore,
        embedder: EmbeddingClient,
        metric: SimilarityMetric = SimilarityMetric.COSINE,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._metric = metric

    async def search(self, query: str, k: int) -> list[ScoredChunk]:
        """Return up to ``k`` chunks with origin="vector".

        Raises:
            SearchError: If the query cannot be embedded or the store fails.
        """
        if k <= 0:
            return []

        try:
            vector = await self._embedder.embed(query)
        except EmbeddingError as exc:
            msg = f"Query embedding failed: {exc}"
            raise SearchError(msg) from exc

        if isinstance(self._store, SupportsSimilaritySearch):
            try:
                pairs = await self._store.similarity_search(vector, k, self._metric)
            except Exception as exc:
                msg = f"Chunk store similarity search failed: {exc}"
                raise ChunkStoreError(msg) from exc
            return rank_top_k(pairs, k, Origin.VECTOR)

        chunks = [c for c in await _scan(self._store) if len(c.embedding) == len(vector)]
        if not chunks:
            return []

        scores = score_vectors(vector, [c.embedding for c in chunks], self._metric)
        pairs = [(c, float(s)) for c, s in zip(chunks, scores, strict=True)]
        return rank_top_k(pairs, k, Origin.VECTOR)


# ---------------------------------------------------------------------------
# KeywordSearcher
# ---------------------------------------------------------------------------


class KeywordSearcher:
    """Rank chunks by how often the query's terms appear in their text."""

    def __init__(self, store: ChunkStore) -> None:
        self._store = store

    async def search(self, query: str, k: int) -> list[ScoredChunk]:
        """Return up to ``k`` matching chunks with origin="keyword".

        Chunks without any term match are excluded.
        """
        terms = query.split()
        if k <= 0 or not terms:
            return []

        pairs: list[tuple[Chunk, float]] = []
        for chunk in await _scan(self._store):
            score = keyword_score(chunk.text, terms)
            if score > 0:
                pairs.append((chunk, float(score)))

        return rank_top_k(pairs, k, Origin.KEYWORD)
