"""Engine-wide settings and the retrieval metrics snapshot.

``EngineSettings`` is the single options map for the whole engine. Every
field is accepted under its snake_case name and its camelCase alias
(``cacheCapacity``, ``fusionWeights``, ...), and derives the per-package
settings models.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.cache._models import CacheSettings
from src.embedding._models import EmbeddingSettings
from src.retrieval._fusion import normalize_weights
from src.retrieval._models import FusionMode, SearchSettings, SimilarityMetric

# --- Config models ---


class EngineSettings(BaseModel):
    """Recognized configuration keys for the retrieval engine."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Cache
    cache_capacity: int = Field(default=1000, gt=0)
    cache_ttl_seconds: int = Field(default=3600, ge=0)
    cache_eviction_batch_size: int = Field(default=50, gt=0)
    janitor_interval_seconds: float = Field(default=3600.0, gt=0)

    # Embedding
    embedding_concurrency: int = Field(default=10, gt=0)
    embedding_max_retries: int = Field(default=3, ge=0)
    embedding_backoff_base_seconds: float = Field(default=2.0, ge=0)
    embedding_backoff_max_seconds: float = Field(default=60.0, gt=0)
    embedding_timeout_seconds: float = Field(default=30.0, gt=0)
    embedding_batch_size: int = Field(default=16, ge=1, le=64)
    embedding_dim: int | None = Field(default=None, gt=0)
    embedding_base_url: str = "http://localhost:8080/v1"
    embedding_model: str = "text-embedding-3-small"
    embedding_api_key: str | None = None

    # Search
    search_top_k: int = Field(default=5, gt=0)
    rrf_constant: int = Field(default=60, gt=0)
    fusion_weights: tuple[float, float] = (0.6, 0.4)
    similarity_metric: SimilarityMetric = SimilarityMetric.COSINE

    # Context assembly
    compression_max_chars: int = Field(default=200, gt=0)
    compression_marker: str = "... [Compressed]"
    context_separator: str = "\n\n---\n\n"

    @field_validator("fusion_weights")
    @classmethod
    def _check_weights(cls, value: tuple[float, float]) -> tuple[float, float]:
        return normalize_weights(value)

    def to_embedding_settings(self) -> EmbeddingSettings:
        return EmbeddingSettings(
            concurrency=self.embedding_concurrency,
            max_retries=self.embedding_max_retries,
            backoff_base_seconds=self.embedding_backoff_base_seconds,
            backoff_max_seconds=self.embedding_backoff_max_seconds,
            timeout_seconds=self.embedding_timeout_seconds,
            batch_size=self.embedding_batch_size,
            embedding_dim=self.embedding_dim,
            base_url=self.embedding_base_url,
            model=self.embedding_model,
            api_key=self.embedding_api_key,
        )

    def to_search_settings(self) -> SearchSettings:
        return SearchSettings(
            top_k=self.search_top_k,
            rrf_constant=self.rrf_constant,
            fusion_mode=FusionMode.WEIGHTED,
            fusion_weights=self.fusion_weights,
            similarity_metric=self.similarity_metric,
        )

    def to_cache_settings(self) -> CacheSettings:
        return CacheSettings(
            capacity=self.cache_capacity,
            ttl_seconds=self.cache_ttl_seconds,
            eviction_batch_size=self.cache_eviction_batch_size,
            janitor_interval_seconds=self.janitor_interval_seconds,
        )


class EngineConfig(BaseModel):
    """Root model for configs/engine.yaml."""

    settings: EngineSettings = Field(default_factory=EngineSettings)


# --- Metrics ---


class RetrievalStats(BaseModel):
    """Snapshot of orchestrator-level counters and latency percentiles."""

    queries: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    failures: int = 0
    latency_mean_ms: float = 0.0
    latency_p50_ms: float = 0.0
    latency_p95_ms: float = 0.0
