from __future__ import annotations

from pydantic import BaseModel, Field

# --- Result model ---


class EmbeddedText(BaseModel):
    """One successfully embedded input text."""

    text: str
    vector: list[float]


# --- Config models ---


class EmbeddingSettings(BaseModel):
    """Settings for EmbeddingClient and the HTTP provider."""

    # Admission gate
    concurrency: int = Field(default=10, gt=0)

    # Retry / timeout
    max_retries: int = Field(default=3, ge=0)
    backoff_base_seconds: float = Field(default=2.0, ge=0)
    backoff_max_seconds: float = Field(default=60.0, gt=0)
    timeout_seconds: float = Field(default=30.0, gt=0)

    # Stream batching
    batch_size: int = Field(default=16, ge=1, le=64)

    # Expected vector size; None accepts any non-empty vector
    embedding_dim: int | None = Field(default=None, gt=0)

    # HTTP provider
    base_url: str = "http://localhost:8080/v1"
    model: str = "text-embedding-3-small"
    api_key: str | None = None
