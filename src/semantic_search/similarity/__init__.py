"""
Similarity module - in-process vector math.
"""

from semantic_search.similarity.engine import (
    cosine_similarity,
    euclidean_distance,
    normalize_vector,
    combine_embeddings,
    rank_by_similarity,
)

__all__ = [
    "cosine_similarity",
    "euclidean_distance",
    "normalize_vector",
    "combine_embeddings",
    "rank_by_similarity",
]
