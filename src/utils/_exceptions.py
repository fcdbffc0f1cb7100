from __future__ import annotations


class RAGEngineError(Exception):
    """Root exception for the retrieval and memoization engine."""


class ConfigurationError(RAGEngineError):
    """Invalid or missing configuration."""


class ValidationError(RAGEngineError):
    """Input validation failed."""
