"""
SearchService - composes the embedding provider with the stores.

The service holds no state of its own between calls: every operation
reads and writes through the injected stores and provider.

Write ordering: the document write always happens before the embedding
write, and the two are not transactional. When the embedding step fails
after the document was written, the document is kept and the failure is
raised as PartialWriteError carrying that document. ``reindex_missing()``
is the repair path for documents left without an embedding.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Sequence

from semantic_search.config import SearchConfig
from semantic_search.core.errors import (
    NotFoundError,
    PartialWriteError,
    ValidationError,
)
from semantic_search.core.protocols import (
    DocumentStore,
    EmbeddingProvider,
    EmbeddingStore,
    VectorIndex,
)
from semantic_search.core.validation import (
    require_text,
    validate_metadata,
    validate_search_params,
)
from semantic_search.embeddings import document_embedding_input
from semantic_search.observability import (
    SEARCH_DOCUMENT_ID,
    SEARCH_OPERATION,
    SEARCH_RESULT_COUNT,
    SEARCH_TOP_SIMILARITY,
    search_attributes,
    start_span,
    update_attributes,
)
from semantic_search.storage.document import Document, SearchResult

logger = logging.getLogger(__name__)


@dataclass
class Page:
    """One page of documents plus the numbers a client needs to page on."""

    items: list[Document]
    total: int
    page: int
    page_size: int
    total_pages: int = field(init=False)

    def __post_init__(self) -> None:
        self.total_pages = math.ceil(self.total / self.page_size)

    def to_dict(self) -> dict:
        return {
            "items": [d.to_dict() for d in self.items],
            "total": self.total,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
        }


def _require_document_id(document_id: Any) -> int:
    if isinstance(document_id, bool) or not isinstance(document_id, int) or document_id < 1:
        raise ValidationError(
            "Document ID must be a positive integer", details={"id": document_id}
        )
    return document_id


class SearchService:
    """
    Semantic search and embedding-aware document writes.

    Dependencies are INJECTED, not created internally.
    """

    def __init__(
        self,
        documents: DocumentStore,
        embeddings: EmbeddingStore,
        provider: EmbeddingProvider,
        index: VectorIndex | None = None,
        config: SearchConfig | None = None,
    ):
        self._documents = documents
        self._embeddings = embeddings
        self._provider = provider
        self._index = index
        self.config = config or SearchConfig()

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def semantic_search(
        self,
        query: str,
        similarity_threshold: float | None = None,
        max_results: int | None = None,
    ) -> list[SearchResult]:
        """
        Rank documents by closeness of meaning to ``query``.

        Raises:
            ValidationError: empty query, threshold outside [0, 1] or
                max_results outside [1, 100]
            ExternalServiceError: provider or database failure
        """
        if similarity_threshold is None:
            similarity_threshold = self.config.similarity_threshold
        if max_results is None:
            max_results = self.config.max_results

        if not isinstance(query, str) or not query.strip():
            raise ValidationError("query required")
        validate_search_params(similarity_threshold, max_results)

        with start_span(
            "search.semantic_search",
            search_attributes(similarity_threshold, max_results),
        ) as span:
            try:
                embedding = await self._provider.generate_embedding(query)
                results = await self._embeddings.search(
                    embedding.vector, similarity_threshold, max_results
                )
            except Exception as e:
                logger.error(f"Error performing semantic search: {e}")
                raise
            span.set_attribute(SEARCH_RESULT_COUNT, len(results))
            if results:
                span.set_attribute(SEARCH_TOP_SIMILARITY, results[0].similarity)

        return results

    async def search_by_vector(
        self,
        vector: Sequence[float],
        similarity_threshold: float | None = None,
        max_results: int | None = None,
    ) -> list[SearchResult]:
        """Search with a ready-made vector; the provider is not called."""
        if similarity_threshold is None:
            similarity_threshold = self.config.similarity_threshold
        if max_results is None:
            max_results = self.config.max_results
        validate_search_params(similarity_threshold, max_results)

        with start_span(
            "search.search_by_vector",
            search_attributes(similarity_threshold, max_results),
        ) as span:
            results = await self._embeddings.search(vector, similarity_threshold, max_results)
            span.set_attribute(SEARCH_RESULT_COUNT, len(results))
        return results

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _embed_document(self, document: Document) -> None:
        embedding = await self._provider.generate_document_embedding(
            document.title, document.content
        )
        await self._embeddings.store(document.id, embedding.vector, embedding.model)

    async def add_document_with_embedding(
        self,
        title: str,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> Document:
        """
        Create a document, then embed and store its stored title/content.

        Input is validated before the provider is called.

        Raises:
            ValidationError: empty title/content or bad metadata
            PartialWriteError: document created, embedding step failed
        """
        require_text(title, "title")
        require_text(content, "content")
        metadata = validate_metadata(metadata)

        with start_span("search.add_document", {SEARCH_OPERATION: "add_document"}) as span:
            try:
                document = await self._documents.create(title, content, metadata)
            except Exception as e:
                logger.error(f"Error adding document: {e}")
                raise
            span.set_attribute(SEARCH_DOCUMENT_ID, document.id)

            try:
                await self._embed_document(document)
            except Exception as e:
                logger.error(f"Document {document.id} stored without embedding: {e}")
                raise PartialWriteError(document, e) from e

        logger.info(f"Added document {document.id}")
        return document

    async def update_document_with_embedding(
        self,
        document_id: int,
        title: str | None = None,
        content: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Document:
        """
        Apply the fields that actually differ from the stored document.

        Nothing differs: the current document is returned with no write and
        no provider call. Title or content differs: a new embedding is
        generated from the updated document and appended. Metadata alone
        never triggers regeneration.

        Raises:
            NotFoundError: unknown document id
            ValidationError: empty title/content or bad metadata
            PartialWriteError: document updated, embedding step failed
        """
        _require_document_id(document_id)
        if title is not None:
            require_text(title, "title")
        if content is not None:
            require_text(content, "content")
        if metadata is not None:
            validate_metadata(metadata)

        current = await self._documents.get(document_id)
        if current is None:
            raise NotFoundError(document_id)

        changes: dict[str, Any] = {}
        if title is not None and title != current.title:
            changes["title"] = title
        if content is not None and content != current.content:
            changes["content"] = content
        if metadata is not None and metadata != current.metadata:
            changes["metadata"] = metadata

        if not changes:
            logger.debug(f"Document {document_id} unchanged, skipping update")
            return current

        regenerate = "title" in changes or "content" in changes
        with start_span(
            "search.update_document",
            update_attributes(document_id, sorted(changes), regenerate),
        ):
            try:
                updated = await self._documents.update(document_id, changes)
            except Exception as e:
                logger.error(f"Error updating document {document_id}: {e}")
                raise
            if updated is None:
                # Deleted between the read and the write.
                raise NotFoundError(document_id)

            if regenerate:
                try:
                    await self._embed_document(updated)
                except Exception as e:
                    logger.error(f"Document {document_id} updated but not re-embedded: {e}")
                    raise PartialWriteError(updated, e, action="updated") from e

        return updated

    async def delete_document(self, document_id: int) -> bool:
        """Delete a document and, by cascade, its embeddings."""
        _require_document_id(document_id)
        deleted = await self._documents.delete(document_id)
        if not deleted:
            raise NotFoundError(document_id)
        logger.info(f"Deleted document {document_id}")
        return True

    async def reindex_missing(self, batch_size: int = 100) -> int:
        """
        Embed every document that owns no embedding.

        Works in batches of ``batch_size`` with one provider round trip per
        batch. Returns the number of documents embedded.
        """
        if batch_size < 1:
            raise ValidationError("batch_size must be a positive integer")

        total = 0
        with start_span("search.reindex_missing", {SEARCH_OPERATION: "reindex_missing"}) as span:
            while True:
                pending = await self._documents.list_without_embeddings(limit=batch_size)
                if not pending:
                    break
                results = await self._provider.generate_embeddings_batch(
                    [document_embedding_input(d.title, d.content) for d in pending]
                )
                for document, embedding in zip(pending, results):
                    await self._embeddings.store(document.id, embedding.vector, embedding.model)
                total += len(pending)
                logger.info(f"Reindexed {len(pending)} document(s)")
            span.set_attribute(SEARCH_RESULT_COUNT, total)
        return total

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_document(self, document_id: int) -> Document:
        _require_document_id(document_id)
        document = await self._documents.get(document_id)
        if document is None:
            raise NotFoundError(document_id)
        return document

    async def list_documents(self, page: int = 1, page_size: int | None = None) -> Page:
        """Newest-first page of documents, 1-based."""
        if page_size is None:
            page_size = self.config.page_size
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ValidationError("page must be a positive integer", details={"page": page})
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
            raise ValidationError(
                "page_size must be a positive integer", details={"page_size": page_size}
            )

        offset = (page - 1) * page_size
        items = await self._documents.list(limit=page_size, offset=offset)
        total = await self._documents.count()
        return Page(items=items, total=total, page=page, page_size=page_size)

    async def database_info(self) -> dict[str, Any]:
        if self._index is None:
            return {"version": None, "vector_index": None}
        return await self._index.version_info()

    async def check_vector_support(self) -> bool:
        """Startup probe: warn when similarity search cannot work."""
        if self._index is None:
            return True
        supported = await self._index.has_vector_index_support()
        if not supported:
            logger.warning(
                "pgvector extension is not installed; semantic search will fail "
                "until `semantic-search init-db` has been run"
            )
        return supported
