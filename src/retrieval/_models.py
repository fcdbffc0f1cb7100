"""Data models for the hybrid search module.

Defines indexed chunks, per-leg scored chunks, fused results and the
search settings.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Enums ---


class Origin(StrEnum):
    """Which search leg produced a scored chunk."""

    VECTOR = "vector"
    KEYWORD = "keyword"


class FusionMode(StrEnum):
    """How the two ranked lists are combined."""

    RRF = "rrf"
    WEIGHTED = "weighted"


class SimilarityMetric(StrEnum):
    """Vector similarity used by the vector leg. Higher scores are better."""

    COSINE = "cosine"
    DOT_PRODUCT = "dot_product"
    EUCLIDEAN = "euclidean"


# --- Stored data ---


class Chunk(BaseModel):
    """An indexed chunk. Read-only to the search engine."""

    model_config = ConfigDict(frozen=True)

    id: str
    document_id: str
    text: str
    embedding: list[float] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


# --- Intermediate results ---


class ScoredChunk(BaseModel):
    """A chunk with a raw score from one search leg."""

    chunk: Chunk
    score: float
    origin: Origin

    @property
    def chunk_id(self) -> str:
        return self.chunk.id


class FusedChunk(BaseModel):
    """Post-fusion chunk with its combined score and per-leg ranks."""

    chunk: Chunk
    score: float
    origins: list[Origin] = Field(default_factory=list)
    ranks: dict[Origin, int] = Field(default_factory=dict)

    @property
    def chunk_id(self) -> str:
        return self.chunk.id

    @property
    def text(self) -> str:
        return self.chunk.text


# --- Config models ---


class SearchSettings(BaseModel):
    """Settings for HybridSearchEngine."""

    top_k: int = Field(default=5, gt=0)
    rrf_constant: int = Field(default=60, gt=0)
    fusion_mode: FusionMode = FusionMode.RRF
    fusion_weights: tuple[float, float] = (0.6, 0.4)
    similarity_metric: SimilarityMetric = SimilarityMetric.COSINE

    @field_validator("fusion_weights")
    @classmethod
    def _check_weights(cls, value: tuple[float, float]) -> tuple[float, float]:
        vector_w, text_w = value
        if vector_w < 0 or text_w < 0:
            msg = "fusion weights must be non-negative"
            raise ValueError(msg)
        if vector_w + text_w <= 0:
            msg = "fusion weights must have a positive sum"
            raise ValueError(msg)
        return value


# --- Final output ---


class HybridSearchResult(BaseModel):
    """Fused results of one hybrid search plus per-leg diagnostics."""

    query_text: str = ""
    mode: FusionMode = FusionMode.RRF
    chunks: list[FusedChunk] = Field(default_factory=list)
    legs_used: list[Origin] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    timings: dict[str, float] = Field(default_factory=dict)
