from __future__ import annotations

from src.utils._exceptions import (
    ConfigurationError,
    RAGEngineError,
    ValidationError,
)
from src.utils._hashing import cache_key, content_hash, normalize_query
from src.utils._logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "RAGEngineError",
    "ValidationError",
    "cache_key",
    "configure_logging",
    "content_hash",
    "get_logger",
    "normalize_query",
]
