"""Shared fixtures for orchestration tests."""

from __future__ import annotations

import pytest

from src.orchestration._models import EngineSettings
from src.orchestration._orchestrator import RetrievalOrchestrator
from src.retrieval._models import Chunk
from src.retrieval._store import InMemoryChunkStore

LONG_TEXT = "Retrieval augmented generation " * 20


class FixedVectorProvider:
    """Embedding provider that returns one fixed vector and counts calls."""

    def __init__(self, vector: list[float] | None = None) -> None:
        self._vector = vector or [1.0, 0.0]
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        return list(self._vector)


class FailingStore:
    """Chunk store whose every read fails."""

    async def scan_all(self) -> list[Chunk]:
        msg = "store offline"
        raise ConnectionError(msg)


async def instant_sleep(_seconds: float) -> None:
    return None


@pytest.fixture()
def chunks() -> list[Chunk]:
    return [
        Chunk(id="c1", document_id="d1", text="The cat sat on the mat", embedding=[1.0, 0.0]),
        Chunk(id="c2", document_id="d1", text=LONG_TEXT, embedding=[0.8, 0.6]),
        Chunk(id="c3", document_id="d2", text="Quantum physics notes", embedding=[0.0, 1.0]),
    ]


@pytest.fixture()
def provider() -> FixedVectorProvider:
    return FixedVectorProvider()


@pytest.fixture()
def settings() -> EngineSettings:
    return EngineSettings(search_top_k=3)


@pytest.fixture()
def orchestrator(settings, provider, chunks) -> RetrievalOrchestrator:
    return RetrievalOrchestrator.from_settings(
        settings,
        provider=provider,
        store=InMemoryChunkStore(chunks),
        sleep=instant_sleep,
    )
