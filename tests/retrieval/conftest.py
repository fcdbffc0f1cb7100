"""Shared fixtures for retrieval tests."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.retrieval._models import Chunk, Origin, ScoredChunk, SearchSettings
from src.retrieval._store import InMemoryChunkStore


def make_chunk(chunk_id: str, text: str = "", embedding: list[float] | None = None) -> Chunk:
    """Shorthand factory for Chunk."""
    return Chunk(
        id=chunk_id,
        document_id=f"doc-{chunk_id}",
        text=text or f"Text for {chunk_id}",
        embedding=embedding if embedding is not None else [1.0, 0.0],
    )


def make_scored(chunk_id: str, score: float, origin: Origin = Origin.VECTOR) -> ScoredChunk:
    """Shorthand factory for ScoredChunk."""
    return ScoredChunk(chunk=make_chunk(chunk_id), score=score, origin=origin)


def make_embedder(vector: list[float] | None = None, side_effect=None) -> MagicMock:
    """Mock EmbeddingClient whose embed() returns ``vector``."""
    embedder = MagicMock()
    embedder.embed = AsyncMock(return_value=vector or [1.0, 0.0], side_effect=side_effect)
    return embedder


class ScanOnlyStore:
    """Store that only supports full scans."""

    def __init__(self, chunks: list[Chunk] | None = None, error: Exception | None = None) -> None:
        self._chunks = chunks or []
        self._error = error
        self.scans = 0

    async def scan_all(self) -> list[Chunk]:
        self.scans += 1
        if self._error is not None:
            raise self._error
        return list(self._chunks)


@pytest.fixture()
def sample_chunks() -> list[Chunk]:
    """Three chunks with 2-d embeddings and distinct texts."""
    return [
        make_chunk("c1", "The cat sat on the mat", [1.0, 0.0]),
        make_chunk("c2", "Dogs chase cats all day", [0.8, 0.6]),
        make_chunk("c3", "Quantum physics lecture notes", [0.0, 1.0]),
    ]


@pytest.fixture()
def store(sample_chunks: list[Chunk]) -> InMemoryChunkStore:
    return InMemoryChunkStore(sample_chunks)


@pytest.fixture()
def search_settings() -> SearchSettings:
    return SearchSettings(top_k=5)
