"""
Factory for the store bundle.

Returns PostgreSQL-backed stores sharing one pool, or in-memory stores
sharing one InMemoryDatabase.
"""

from __future__ import annotations

from dataclasses import dataclass

from semantic_search.config import Settings
from semantic_search.core.protocols import DocumentStore, EmbeddingStore
from semantic_search.storage.memory import (
    InMemoryDatabase,
    InMemoryDocumentStore,
    InMemoryEmbeddingStore,
)
from semantic_search.storage.postgres import (
    PgDocumentStore,
    PgEmbeddingStore,
    PostgresDatabase,
)


@dataclass
class Stores:
    """The document store, embedding store and index probe of one backend."""

    documents: DocumentStore
    embeddings: EmbeddingStore
    index: PostgresDatabase | InMemoryDatabase

    async def connect(self) -> None:
        await self.index.connect()

    async def close(self) -> None:
        await self.index.close()


def get_stores(settings: Settings | None = None, use_postgres: bool | None = None) -> Stores:
    """
    Factory function to get the appropriate stores.

    Args:
        settings: Process settings (defaults to Settings())
        use_postgres: Overrides ``settings.use_postgres`` when given
    """
    settings = settings or Settings()
    if use_postgres is None:
        use_postgres = settings.use_postgres
    dimensions = settings.embeddings.dimensions

    if use_postgres:
        db = PostgresDatabase(settings.database)
        return Stores(
            documents=PgDocumentStore(db),
            embeddings=PgEmbeddingStore(db, dimensions=dimensions),
            index=db,
        )

    memory = InMemoryDatabase()
    return Stores(
        documents=InMemoryDocumentStore(memory),
        embeddings=InMemoryEmbeddingStore(memory, dimensions=dimensions),
        index=memory,
    )
