"""
In-memory stores for development and testing.

Implement the same protocols as the PostgreSQL stores without a
database. Both stores share one InMemoryDatabase so that deleting a
document cascades to its embeddings, and search ranks in-process with
the similarity engine.
"""

from __future__ import annotations

import copy
import itertools
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Sequence

import numpy as np

from semantic_search.core.errors import DimensionMismatch, ExternalServiceError
from semantic_search.core.validation import (
    require_text,
    validate_metadata,
    validate_page_window,
)
from semantic_search.similarity import rank_by_similarity
from semantic_search.storage.document import Document, Embedding, SearchResult

UPDATABLE_FIELDS = ("title", "content", "metadata")


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class InMemoryDatabase:
    """Shared tables for the in-memory stores."""

    documents: dict[int, Document] = field(default_factory=dict)
    embeddings: dict[int, Embedding] = field(default_factory=dict)
    _document_ids: itertools.count = field(default_factory=lambda: itertools.count(1))
    _embedding_ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    def next_document_id(self) -> int:
        return next(self._document_ids)

    def next_embedding_id(self) -> int:
        return next(self._embedding_ids)

    async def connect(self) -> None:
        """No-op for in-memory store."""
        pass

    async def close(self) -> None:
        """No-op for in-memory store."""
        pass

    async def has_vector_index_support(self) -> bool:
        # Ranking is done in-process, so search always works.
        return True

    async def version_info(self) -> dict[str, Any]:
        return {"version": "in-memory", "vector_index": True}


def _copy(document: Document) -> Document:
    return replace(document, metadata=copy.deepcopy(document.metadata))


class InMemoryDocumentStore:
    """Document CRUD over a dict."""

    def __init__(self, db: InMemoryDatabase | None = None):
        self._db = db or InMemoryDatabase()

    async def create(
        self, title: str, content: str, metadata: dict[str, Any] | None = None
    ) -> Document:
        require_text(title, "title")
        require_text(content, "content")
        metadata = copy.deepcopy(validate_metadata(metadata))

        now = _now()
        document = Document(
            id=self._db.next_document_id(),
            title=title,
            content=content,
            metadata=metadata,
            created_at=now,
            updated_at=now,
        )
        self._db.documents[document.id] = document
        return _copy(document)

    async def get(self, document_id: int) -> Document | None:
        document = self._db.documents.get(document_id)
        return _copy(document) if document else None

    async def list(self, limit: int = 100, offset: int = 0) -> list[Document]:
        validate_page_window(limit, offset)
        ordered = sorted(
            self._db.documents.values(),
            key=lambda d: (d.created_at, d.id),
            reverse=True,
        )
        return [_copy(d) for d in ordered[offset : offset + limit]]

    async def update(self, document_id: int, fields: dict[str, Any]) -> Document | None:
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if not changes:
            return None
        if "title" in changes:
            require_text(changes["title"], "title")
        if "content" in changes:
            require_text(changes["content"], "content")
        if "metadata" in changes:
            changes["metadata"] = copy.deepcopy(validate_metadata(changes["metadata"]))

        document = self._db.documents.get(document_id)
        if document is None:
            return None

        updated = replace(document, **changes, updated_at=_now())
        self._db.documents[document_id] = updated
        return _copy(updated)

    async def delete(self, document_id: int) -> bool:
        if self._db.documents.pop(document_id, None) is None:
            return False
        owned = [e.id for e in self._db.embeddings.values() if e.document_id == document_id]
        for embedding_id in owned:
            del self._db.embeddings[embedding_id]
        return True

    async def count(self) -> int:
        return len(self._db.documents)

    async def list_without_embeddings(self, limit: int = 100) -> list[Document]:
        validate_page_window(limit, 0)
        embedded = {e.document_id for e in self._db.embeddings.values()}
        missing = [d for d in sorted(self._db.documents.values(), key=lambda d: d.id)
                   if d.id not in embedded]
        return [_copy(d) for d in missing[:limit]]


class InMemoryEmbeddingStore:
    """
    Append-only embeddings ranked with cosine similarity in-process.

    Only the newest embedding of each document takes part in search,
    matching the PostgreSQL ``semantic_search`` function.
    """

    def __init__(self, db: InMemoryDatabase | None = None, dimensions: int = 1536):
        self._db = db or InMemoryDatabase()
        self.dimensions = dimensions

    def _as_vector(self, vector: Sequence[float]) -> np.ndarray:
        arr = np.asarray(vector, dtype=np.float32)
        if arr.ndim != 1 or arr.shape[0] != self.dimensions:
            raise DimensionMismatch(self.dimensions, arr.size)
        return arr

    async def store(self, document_id: int, vector: Sequence[float], model: str) -> Embedding:
        arr = self._as_vector(vector)
        if document_id not in self._db.documents:
            # Same outcome as the foreign key violation in PostgreSQL.
            raise ExternalServiceError(
                "memory", f"document {document_id} does not exist"
            )

        embedding = Embedding(
            id=self._db.next_embedding_id(),
            document_id=document_id,
            vector=arr.copy(),
            model=model,
            created_at=_now(),
        )
        self._db.embeddings[embedding.id] = embedding
        return embedding

    def _current_embeddings(self) -> list[Embedding]:
        current: dict[int, Embedding] = {}
        for embedding in self._db.embeddings.values():
            best = current.get(embedding.document_id)
            if best is None or (embedding.created_at, embedding.id) > (best.created_at, best.id):
                current[embedding.document_id] = embedding
        return list(current.values())

    async def search(
        self,
        query_vector: Sequence[float],
        similarity_threshold: float,
        max_results: int,
    ) -> list[SearchResult]:
        query = self._as_vector(query_vector)
        ranked = rank_by_similarity(
            query,
            [(e, e.vector) for e in self._current_embeddings()],
            similarity_threshold,
            max_results,
        )
        results = []
        for embedding, similarity in ranked:
            document = self._db.documents[embedding.document_id]
            results.append(
                SearchResult(
                    id=embedding.id,
                    document_id=document.id,
                    title=document.title,
                    content=document.content,
                    similarity=similarity,
                )
            )
        return results

    async def list_for_document(self, document_id: int) -> list[Embedding]:
        owned = [e for e in self._db.embeddings.values() if e.document_id == document_id]
        return sorted(owned, key=lambda e: (e.created_at, e.id), reverse=True)

    async def latest_for_document(self, document_id: int) -> Embedding | None:
        embeddings = await self.list_for_document(document_id)
        return embeddings[0] if embeddings else None
