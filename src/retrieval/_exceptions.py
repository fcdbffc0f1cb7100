from __future__ import annotations

from src.utils._exceptions import RAGEngineError


class RetrievalError(RAGEngineError):
    """Base exception for the hybrid search module."""


class SearchError(RetrievalError):
    """One search leg (vector or keyword) failed."""


class ChunkStoreError(SearchError):
    """The chunk store could not be read."""


class RetrievalFailedError(RetrievalError):
    """Every search leg failed; no results can be produced."""
