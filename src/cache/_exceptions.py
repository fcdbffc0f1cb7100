from __future__ import annotations

from src.utils._exceptions import RAGEngineError


class CacheError(RAGEngineError):
    """Cache read/write failure or inconsistent cache state."""
