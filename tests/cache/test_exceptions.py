"""Tests for cache exceptions."""

from __future__ import annotations

from src.cache._exceptions import CacheError
from src.utils._exceptions import RAGEngineError


def test_cache_error_is_engine_error() -> None:
    assert issubclass(CacheError, RAGEngineError)
