"""
Core protocols defining contracts for the entire system.

All infrastructure components implement these protocols, enabling
dependency injection and easy testing.

PATTERN: every infrastructure component has the same structure
- Protocol defines the contract
- Production implementation (OpenAI, PostgreSQL)
- Test double (MockEmbeddings, in-memory stores)
- Factory function for instantiation

Every method that touches the network is a coroutine. The suspension
points of an operation are exactly the awaits on these methods.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, Sequence, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from semantic_search.storage.document import Document, Embedding, SearchResult


# ---------------------------------------------------------------------------
# EMBEDDING PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@dataclass
class EmbeddingResult:
    """A generated vector together with the model that produced it."""

    vector: np.ndarray
    model: str


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Contract for embedding generation.

    Implementations:
    - OpenAIEmbeddings (production)
    - MockEmbeddings (testing)
    """

    model: str

    @property
    def dimensions(self) -> int:
        """Length of every vector this provider returns."""
        ...

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Generate an embedding for a single text."""
        ...

    async def generate_embeddings_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Generate embeddings for many texts in one round trip."""
        ...

    async def generate_document_embedding(self, title: str, content: str) -> EmbeddingResult:
        """Generate an embedding from a document's title and content."""
        ...


# ---------------------------------------------------------------------------
# STORE PROTOCOLS
# ---------------------------------------------------------------------------


@runtime_checkable
class DocumentStore(Protocol):
    """
    Contract for document CRUD.

    Implementations:
    - PgDocumentStore (production with PostgreSQL)
    - InMemoryDocumentStore (testing/development)
    """

    async def create(
        self, title: str, content: str, metadata: dict[str, Any] | None = None
    ) -> Document:
        ...

    async def get(self, document_id: int) -> Document | None:
        ...

    async def list(self, limit: int = 100, offset: int = 0) -> list[Document]:
        ...

    async def update(self, document_id: int, fields: dict[str, Any]) -> Document | None:
        ...

    async def delete(self, document_id: int) -> bool:
        ...

    async def count(self) -> int:
        ...

    async def list_without_embeddings(self, limit: int = 100) -> list[Document]:
        """Documents that own zero embedding rows (repair candidates)."""
        ...


@runtime_checkable
class EmbeddingStore(Protocol):
    """
    Contract for append-only embedding persistence and similarity search.

    Implementations:
    - PgEmbeddingStore (pgvector HNSW index)
    - InMemoryEmbeddingStore (in-process SimilarityEngine)
    """

    async def store(
        self, document_id: int, vector: Sequence[float], model: str
    ) -> Embedding:
        ...

    async def search(
        self,
        query_vector: Sequence[float],
        similarity_threshold: float,
        max_results: int,
    ) -> list[SearchResult]:
        ...

    async def list_for_document(self, document_id: int) -> list[Embedding]:
        ...


@runtime_checkable
class VectorIndex(Protocol):
    """Capability probe for the vector-capable store."""

    async def has_vector_index_support(self) -> bool:
        ...

    async def version_info(self) -> dict[str, Any]:
        ...
