"""
Seed data for a fresh document store.
"""

from semantic_search.seeds.sample_documents import (
    get_sample_documents,
    seed_documents,
)

__all__ = ["get_sample_documents", "seed_documents"]
