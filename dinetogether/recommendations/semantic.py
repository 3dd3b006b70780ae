from __future__ import annotations

import logging

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from ..embeddings.encoder import encode_batch, encode_text
from ..places.models import CandidateRestaurant

logger = logging.getLogger(__name__)


def _candidate_text(candidate: CandidateRestaurant) -> str:
    return " ".join(
        part for part in (candidate.name, candidate.cuisine, candidate.address) if part
    ).lower()


def rank_by_query(
    query: str,
    candidates: list[CandidateRestaurant],
    limit: int = 6,
) -> list[tuple[CandidateRestaurant, float]]:
    """
    Blend query similarity with rating: 0.5 * cosine (mapped to [0, 1]) +
    0.5 * rating / 5. If the encoder cannot be loaded the ranking uses the
    rating term alone.
    """
    if not candidates:
        return []

    rating_scores = np.array([(c.rating or 0.0) / 5.0 for c in candidates])

    try:
        query_vec = np.asarray(encode_text(query)).reshape(1, -1)
        candidate_vecs = np.asarray(encode_batch([_candidate_text(c) for c in candidates]))
        similarity = cosine_similarity(query_vec, candidate_vecs).flatten()
        scores = 0.5 * ((similarity + 1.0) / 2.0) + 0.5 * rating_scores
    except Exception:
        logger.warning("Semantic ranking unavailable, ranking by rating only", exc_info=True)
        scores = rating_scores

    order = np.argsort(-scores, kind="stable")[:limit]
    return [(candidates[i], round(float(scores[i]), 4)) for i in order]
