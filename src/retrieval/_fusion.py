"""Rank fusion for combining the vector and keyword legs.

Two strategies share one output shape (FusedChunk) and one tie-break order:
higher fused score first, then lower sum of per-list ranks, then chunk id.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from src.retrieval._models import FusedChunk, Origin
from src.utils._logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from src.retrieval._models import Chunk, ScoredChunk

_log = get_logger(__name__)

# Relative tolerance for treating two float scores as equal.
SCORE_TOLERANCE = 1e-6


def _collect_ranks(
    channel_results: Mapping[Origin, list[ScoredChunk]],
) -> tuple[dict[str, Chunk], dict[str, dict[Origin, int]]]:
    """Map chunk ids to their chunk and their 1-based rank in each list.

    A chunk repeated inside one list keeps its best (first) rank.
    """
    chunks: dict[str, Chunk] = {}
    ranks: dict[str, dict[Origin, int]] = {}
    for origin, results in channel_results.items():
        for rank_zero_idx, scored in enumerate(results):
            cid = scored.chunk_id
            chunks.setdefault(cid, scored.chunk)
            ranks.setdefault(cid, {}).setdefault(origin, rank_zero_idx + 1)
    return chunks, ranks


def _order(
    scores: dict[str, float],
    chunks: dict[str, Chunk],
    ranks: dict[str, dict[Origin, int]],
    top_k: int,
) -> list[FusedChunk]:
    sorted_ids = sorted(
        scores,
        key=lambda cid: (-scores[cid], sum(ranks[cid].values()), cid),
    )
    return [
        FusedChunk(
            chunk=chunks[cid],
            score=scores[cid],
            origins=list(ranks[cid]),
            ranks=dict(ranks[cid]),
        )
        for cid in sorted_ids[:top_k]
    ]


class ReciprocalRankFusion:
    """Combines ranked lists using RRF.

    RRF score for a chunk = sum over lists of 1 / (k + rank_in_list)
    where rank starts at 1 for the best chunk of each list.
    """

    def __init__(self, k: int = 60) -> None:
        """Initialize with the RRF constant k.

        Args:
            k: The RRF constant. Higher values reduce the impact of rank
               differences. Standard default is 60.
        """
        if k <= 0:
            msg = "RRF constant must be positive"
            raise ValueError(msg)
        self._k = k

    @property
    def k(self) -> int:
        """The RRF constant."""
        return self._k

    def fuse(
        self,
        channel_results: Mapping[Origin, list[ScoredChunk]],
        top_k: int = 10,
    ) -> list[FusedChunk]:
        """Fuse ranked lists.

        Args:
            channel_results: Mapping of origin to its ranked list, best first.
            top_k: Maximum number of fused results to return.

        Returns:
            FusedChunks sorted by RRF score descending, at most top_k.
        """
        if top_k <= 0 or not channel_results:
            return []

        chunks, ranks = _collect_ranks(channel_results)
        if not ranks:
            return []

        rrf_scores = {
            cid: sum(1.0 / (self._k + rank) for rank in per_list.values())
            for cid, per_list in ranks.items()
        }
        fused = _order(rrf_scores, chunks, ranks, top_k)

        _log.info(
            "rrf_fusion_complete",
            num_lists=len(channel_results),
            input_chunks=sum(len(r) for r in channel_results.values()),
            unique_chunks=len(rrf_scores),
            output_chunks=len(fused),
            k=self._k,
        )
        return fused


class WeightedScoreFusion:
    """Combines min-max normalized raw scores with per-leg weights.

    Each list's scores are scaled to [0, 1] independently; a list whose
    scores are all equal maps every member to 1.0, and a missing or empty
    list contributes nothing. Weights are normalized to sum to 1.
    """

    def __init__(self, weights: tuple[float, float] = (0.6, 0.4)) -> None:
        self._weights = normalize_weights(weights)

    @property
    def weights(self) -> tuple[float, float]:
        """Normalized (vector, keyword) weights."""
        return self._weights

    def fuse(
        self,
        channel_results: Mapping[Origin, list[ScoredChunk]],
        top_k: int = 10,
        weights: tuple[float, float] | None = None,
    ) -> list[FusedChunk]:
        """Fuse ranked lists by weighted normalized score."""
        if top_k <= 0 or not channel_results:
            return []

        w_vector, w_keyword = normalize_weights(weights) if weights else self._weights
        leg_weights = {Origin.VECTOR: w_vector, Origin.KEYWORD: w_keyword}

        chunks, ranks = _collect_ranks(channel_results)
        if not ranks:
            return []

        combined: dict[str, float] = dict.fromkeys(ranks, 0.0)
        for origin, results in channel_results.items():
            if not results:
                continue
            weight = leg_weights.get(Origin(origin), 0.0)
            seen: set[str] = set()
            for cid, norm in zip(
                (sc.chunk_id for sc in results),
                min_max_normalize([sc.score for sc in results]),
                strict=True,
            ):
                if cid in seen:
                    continue
                seen.add(cid)
                combined[cid] += weight * norm

        fused = _order(combined, chunks, ranks, top_k)

        _log.info(
            "weighted_fusion_complete",
            weights=[w_vector, w_keyword],
            unique_chunks=len(combined),
            output_chunks=len(fused),
        )
        return fused


def normalize_weights(weights: tuple[float, float]) -> tuple[float, float]:
    """Scale a (vector, keyword) weight pair to sum to 1."""
    vector_w, text_w = (float(w) for w in weights)
    total = vector_w + text_w
    if vector_w < 0 or text_w < 0 or total <= 0:
        msg = f"Invalid fusion weights: {weights!r}"
        raise ValueError(msg)
    return vector_w / total, text_w / total


def min_max_normalize(scores: list[float]) -> list[float]:
    """Scale scores to [0, 1]. Equal scores (within tolerance) all map to 1.0."""
    if not scores:
        return []
    lo, hi = min(scores), max(scores)
    span = hi - lo
    if span <= SCORE_TOLERANCE * max(1.0, abs(hi), abs(lo)):
        return [1.0] * len(scores)
    return [(s - lo) / span for s in scores]
