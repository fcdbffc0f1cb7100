"""Semantic cache: LFU + TTL memoization of retrieval context."""

from src.cache._cache import SemanticCache
from src.cache._janitor import CacheJanitor
from src.cache._models import CacheEntry, CacheSettings, CacheStats

__all__ = [
    "CacheEntry",
    "CacheJanitor",
    "CacheSettings",
    "CacheStats",
    "SemanticCache",
]
