"""
Storage module - documents, embeddings and vector search.

This module provides:
- Document, Embedding, SearchResult: record types
- PostgresDatabase, PgDocumentStore, PgEmbeddingStore: production stores
- InMemoryDatabase, InMemoryDocumentStore, InMemoryEmbeddingStore: test doubles
- get_stores(): Factory function
"""

from semantic_search.storage.document import Document, Embedding, SearchResult
from semantic_search.storage.postgres import (
    PostgresDatabase,
    PgDocumentStore,
    PgEmbeddingStore,
)
from semantic_search.storage.memory import (
    InMemoryDatabase,
    InMemoryDocumentStore,
    InMemoryEmbeddingStore,
)
from semantic_search.storage.factory import Stores, get_stores

__all__ = [
    # Records
    "Document",
    "Embedding",
    "SearchResult",
    # Implementations
    "PostgresDatabase",
    "PgDocumentStore",
    "PgEmbeddingStore",
    "InMemoryDatabase",
    "InMemoryDocumentStore",
    "InMemoryEmbeddingStore",
    # Factory
    "Stores",
    "get_stores",
]
