"""Similarity metrics for the vector leg.

Each SimilarityMetric variant maps to one pure scoring function over a query
vector and a matrix of candidate vectors. All functions return "higher is
better" scores so the vector leg can always sort descending.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from src.retrieval._models import SimilarityMetric

if TYPE_CHECKING:
    from collections.abc import Callable

# Guards the cosine denominator against zero-norm vectors.
_EPS = 1e-12


def cosine_similarity(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against every row of ``matrix``."""
    q_norm = np.linalg.norm(query)
    m_norm = np.linalg.norm(matrix, axis=1)
    denom = np.maximum(q_norm * m_norm, _EPS)
    return (matrix @ query) / denom


def dot_product(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Raw inner product against every row of ``matrix``."""
    return matrix @ query


def euclidean_similarity(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Euclidean distance mapped to ``1 / (1 + d)``."""
    distances = np.linalg.norm(matrix - query, axis=1)
    return 1.0 / (1.0 + distances)


_SCORERS: dict[SimilarityMetric, Callable[[np.ndarray, np.ndarray], np.ndarray]] = {
    SimilarityMetric.COSINE: cosine_similarity,
    SimilarityMetric.DOT_PRODUCT: dot_product,
    SimilarityMetric.EUCLIDEAN: euclidean_similarity,
}


def get_scorer(
    metric: SimilarityMetric,
) -> Callable[[np.ndarray, np.ndarray], np.ndarray]:
    """Return the scoring function for ``metric``."""
    return _SCORERS[SimilarityMetric(metric)]


def score_vectors(
    query: list[float] | np.ndarray,
    vectors: list[list[float]] | np.ndarray,
    metric: SimilarityMetric = SimilarityMetric.COSINE,
) -> np.ndarray:
    """Score candidate vectors against ``query``; returns a float64 array."""
    q = np.asarray(query, dtype=np.float64)
    m = np.asarray(vectors, dtype=np.float64)
    if m.size == 0:
        return np.zeros(0, dtype=np.float64)
    return get_scorer(metric)(q, m.reshape(len(m), -1))
