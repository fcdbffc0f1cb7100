from __future__ import annotations

from src.utils._exceptions import RAGEngineError


class EmbeddingError(RAGEngineError):
    """Base exception for the embedding module."""


class TransientEmbeddingError(EmbeddingError):
    """Provider failure worth retrying (throttling, 5xx, dropped connection)."""


class EmbeddingProviderError(EmbeddingError):
    """Provider rejected the request; retrying will not help."""


class MalformedEmbeddingResponseError(EmbeddingError):
    """Provider returned something that is not a usable vector."""


class EmbeddingRetryExhaustedError(EmbeddingError):
    """Transient failures persisted past the configured retry budget."""
