"""Hybrid search: vector + keyword legs fused by RRF or weighted scores."""

from src.retrieval._engine import HybridSearchEngine
from src.retrieval._models import (
    Chunk,
    FusedChunk,
    FusionMode,
    HybridSearchResult,
    Origin,
    ScoredChunk,
    SearchSettings,
    SimilarityMetric,
)
from src.retrieval._store import ChunkStore, InMemoryChunkStore

__all__ = [
    "Chunk",
    "ChunkStore",
    "FusedChunk",
    "FusionMode",
    "HybridSearchEngine",
    "HybridSearchResult",
    "InMemoryChunkStore",
    "Origin",
    "ScoredChunk",
    "SearchSettings",
    "SimilarityMetric",
]
