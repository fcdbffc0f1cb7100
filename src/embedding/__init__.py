"""Embedding client: admission-gated, retrying text -> vector calls."""

from src.embedding._client import EmbeddingClient
from src.embedding._models import EmbeddedText, EmbeddingSettings
from src.embedding._provider import EmbeddingProvider, HttpEmbeddingProvider

__all__ = [
    "EmbeddedText",
    "EmbeddingClient",
    "EmbeddingProvider",
    "EmbeddingSettings",
    "HttpEmbeddingProvider",
]
