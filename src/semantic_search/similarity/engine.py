"""
Vector similarity math.

Pure functions over numpy arrays: no I/O and no state. Used by the
in-memory embedding store for in-process ranking and available to callers
that need to compare or blend embeddings themselves.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from semantic_search.core.errors import DimensionMismatch, ValidationError

VectorLike = Sequence[float] | np.ndarray


def _as_array(v: VectorLike) -> np.ndarray:
    return np.asarray(v, dtype=np.float64)


def _check_dimensions(a: np.ndarray, b: np.ndarray) -> None:
    if a.shape != b.shape:
        raise DimensionMismatch(len(a), len(b))


def cosine_similarity(a: VectorLike, b: VectorLike) -> float:
    """Cosine of the angle between two vectors, in [-1, 1].

    Returns 0.0 when either vector has zero norm.
    """
    a_arr, b_arr = _as_array(a), _as_array(b)
    _check_dimensions(a_arr, b_arr)

    norm_a = np.linalg.norm(a_arr)
    norm_b = np.linalg.norm(b_arr)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    return float(np.dot(a_arr, b_arr) / (norm_a * norm_b))


def euclidean_distance(a: VectorLike, b: VectorLike) -> float:
    """L2 norm of the element-wise difference."""
    a_arr, b_arr = _as_array(a), _as_array(b)
    _check_dimensions(a_arr, b_arr)
    return float(np.linalg.norm(a_arr - b_arr))


def normalize_vector(v: VectorLike) -> np.ndarray:
    """Scale to unit L2 norm. The zero vector is returned unchanged."""
    arr = _as_array(v)
    norm = np.linalg.norm(arr)
    if norm == 0:
        return arr
    return arr / norm


def combine_embeddings(
    vectors: Sequence[VectorLike],
    weights: Sequence[float] | None = None,
) -> np.ndarray:
    """
    Weighted blend of several embeddings, normalized to unit length.

    Weights default to uniform when omitted or when their count does not
    match the number of vectors. Supplied weights are rescaled to sum to 1.

    Raises:
        ValidationError: no vectors, or weights summing to zero
        DimensionMismatch: vectors of different lengths
    """
    if len(vectors) == 0:
        raise ValidationError("At least one embedding is required")

    arrays = [_as_array(v) for v in vectors]
    dim = len(arrays[0])
    for arr in arrays[1:]:
        if len(arr) != dim:
            raise DimensionMismatch(dim, len(arr))

    if weights is None or len(weights) != len(arrays):
        effective = np.full(len(arrays), 1.0 / len(arrays))
    else:
        effective = np.asarray(weights, dtype=np.float64)

    total = effective.sum()
    if total == 0:
        raise ValidationError("Embedding weights must not sum to zero")
    effective = effective / total

    combined = np.zeros(dim, dtype=np.float64)
    for arr, weight in zip(arrays, effective):
        combined += arr * weight

    return normalize_vector(combined)


def rank_by_similarity(
    query: VectorLike,
    candidates: Sequence[tuple[object, VectorLike]],
    similarity_threshold: float,
    limit: int,
) -> list[tuple[object, float]]:
    """
    Score ``(key, vector)`` candidates against ``query``.

    Keeps candidates with similarity strictly above the threshold, sorted
    best first and capped at ``limit``. Ties keep their input order.
    """
    scored = []
    for key, vector in candidates:
        score = cosine_similarity(query, vector)
        if score > similarity_threshold:
            scored.append((key, score))

    scored.sort(key=lambda item: item[1], reverse=True)
    return scored[:limit]
