"""
PostgreSQL + pgvector stores.

This module contains:
1. PostgresDatabase - pooled async connections, timing, error mapping
2. PgDocumentStore - document CRUD
3. PgEmbeddingStore - append-only embeddings and similarity search

Dependencies are INJECTED: both stores take the same PostgresDatabase, so
one bounded pool serves every statement. Each statement runs on its own
autocommit connection; there are no cross-statement transactions.

Any driver error, including a pool or statement timeout, is re-raised as
ExternalServiceError.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Sequence

import numpy as np
import psycopg
from pgvector.psycopg import register_vector_async
from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb
from psycopg_pool import AsyncConnectionPool

from semantic_search.config import DatabaseConfig
from semantic_search.core.errors import DimensionMismatch, ExternalServiceError
from semantic_search.core.validation import (
    require_text,
    validate_metadata,
    validate_page_window,
)
from semantic_search.observability import start_span
from semantic_search.observability.attributes import DB_OPERATION, DB_SYSTEM
from semantic_search.storage import schema
from semantic_search.storage.document import Document, Embedding, SearchResult

logger = logging.getLogger(__name__)

SERVICE_NAME = "postgresql"
DOCUMENT_COLUMNS = "id, title, content, metadata, created_at, updated_at"
EMBEDDING_COLUMNS = "id, document_id, embedding, model, created_at"
UPDATABLE_FIELDS = ("title", "content", "metadata")


# ---------------------------------------------------------------------------
# CONNECTION POOL
# ---------------------------------------------------------------------------


class PostgresDatabase:
    """
    Owner of the connection pool.

    ``connect()`` opens the pool and waits for ``pool_min_size``
    connections; ``close()`` drains it. Statements issued before
    ``connect()`` open the pool lazily.
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._pool: AsyncConnectionPool | None = None
        self._connect_lock = asyncio.Lock()

    async def _configure(self, conn: psycopg.AsyncConnection) -> None:
        # The vector type only exists once the extension is installed;
        # init-db creates it, and the capability probe must work without it.
        cur = await conn.execute("SELECT 1 FROM pg_type WHERE typname = 'vector'")
        if await cur.fetchone() is not None:
            await register_vector_async(conn)

    async def connect(self) -> None:
        """Open the connection pool. Concurrent callers share one pool."""
        if self._pool is not None:
            return
        async with self._connect_lock:
            if self._pool is None:
                self._pool = await self._open_pool()
                logger.info("Connected to PostgreSQL database")

    async def _open_pool(self) -> AsyncConnectionPool:
        pool = AsyncConnectionPool(
            self.config.connection_string,
            min_size=self.config.pool_min_size,
            max_size=self.config.pool_max_size,
            timeout=self.config.pool_timeout_seconds,
            kwargs={
                "autocommit": True,
                "row_factory": dict_row,
                "options": f"-c statement_timeout={self.config.statement_timeout_ms}",
            },
            configure=self._configure,
            open=False,
        )
        try:
            await pool.open(wait=True, timeout=self.config.pool_timeout_seconds)
        except psycopg.Error as e:
            await pool.close()
            raise ExternalServiceError(SERVICE_NAME, f"could not connect: {e}") from e
        return pool

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[psycopg.AsyncConnection]:
        """Borrow a pooled connection, mapping driver errors."""
        if self._pool is None:
            await self.connect()
        try:
            async with self._pool.connection() as conn:
                yield conn
        except psycopg.Error as e:
            raise ExternalServiceError(SERVICE_NAME, str(e)) from e

    async def execute(self, query: str | sql.Composable, params: Sequence[Any] | None = None):
        """Run one statement; return ``(rows, rowcount)``."""
        start = time.perf_counter()
        async with self.connection() as conn:
            cur = await conn.execute(query, params)
            rows = await cur.fetchall() if cur.description else []
            rowcount = cur.rowcount
        duration_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"Executed query in {duration_ms:.1f}ms ({rowcount} rows)")
        return rows, rowcount

    async def fetch_all(self, query, params=None) -> list[dict[str, Any]]:
        rows, _ = await self.execute(query, params)
        return rows

    async def fetch_one(self, query, params=None) -> dict[str, Any] | None:
        rows, _ = await self.execute(query, params)
        return rows[0] if rows else None

    async def initialize_schema(self, dimensions: int) -> None:
        """Create the schema on a dedicated connection.

        Runs outside the pool so connections opened afterwards see the
        vector type during configuration.
        """
        try:
            async with await psycopg.AsyncConnection.connect(
                self.config.connection_string, autocommit=True
            ) as conn:
                await schema.initialize(conn, dimensions)
        except psycopg.Error as e:
            raise ExternalServiceError(SERVICE_NAME, f"schema setup failed: {e}") from e

    async def has_vector_index_support(self) -> bool:
        """True when the pgvector extension is installed."""
        row = await self.fetch_one(
            "SELECT EXISTS (SELECT 1 FROM pg_extension WHERE extname = 'vector') AS installed"
        )
        return bool(row and row["installed"])

    async def version_info(self) -> dict[str, Any]:
        """Server version string and vector index availability."""
        row = await self.fetch_one("SELECT version() AS version")
        return {
            "version": row["version"] if row else None,
            "vector_index": await self.has_vector_index_support(),
        }


# ---------------------------------------------------------------------------
# DOCUMENT STORE
# ---------------------------------------------------------------------------


def _row_to_document(row: dict[str, Any]) -> Document:
    return Document(
        id=row["id"],
        title=row["title"],
        content=row["content"],
        metadata=row["metadata"] or {},
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PgDocumentStore:
    """Document CRUD against the ``documents`` table."""

    def __init__(self, db: PostgresDatabase):
        self._db = db

    async def create(
        self, title: str, content: str, metadata: dict[str, Any] | None = None
    ) -> Document:
        """Insert a document; id and timestamps come from the database."""
        require_text(title, "title")
        require_text(content, "content")
        metadata = validate_metadata(metadata)

        row = await self._db.fetch_one(
            f"""
            INSERT INTO documents (title, content, metadata)
            VALUES (%s, %s, %s)
            RETURNING {DOCUMENT_COLUMNS}
            """,
            (title, content, Jsonb(metadata)),
        )
        return _row_to_document(row)

    async def get(self, document_id: int) -> Document | None:
        row = await self._db.fetch_one(
            f"SELECT {DOCUMENT_COLUMNS} FROM documents WHERE id = %s",
            (document_id,),
        )
        return _row_to_document(row) if row else None

    async def list(self, limit: int = 100, offset: int = 0) -> list[Document]:
        """Newest first."""
        validate_page_window(limit, offset)
        rows = await self._db.fetch_all(
            f"""
            SELECT {DOCUMENT_COLUMNS} FROM documents
            ORDER BY created_at DESC, id DESC
            LIMIT %s OFFSET %s
            """,
            (limit, offset),
        )
        return [_row_to_document(r) for r in rows]

    async def update(self, document_id: int, fields: dict[str, Any]) -> Document | None:
        """
        Apply a partial update.

        Returns None when ``fields`` holds nothing updatable (no statement is
        sent) or when the id does not exist.
        """
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        if not changes:
            return None
        if "title" in changes:
            require_text(changes["title"], "title")
        if "content" in changes:
            require_text(changes["content"], "content")
        if "metadata" in changes:
            changes["metadata"] = Jsonb(validate_metadata(changes["metadata"]))

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(name)) for name in changes
        )
        query = sql.SQL(
            "UPDATE documents SET {} WHERE id = %s RETURNING " + DOCUMENT_COLUMNS
        ).format(assignments)

        row = await self._db.fetch_one(query, (*changes.values(), document_id))
        return _row_to_document(row) if row else None

    async def delete(self, document_id: int) -> bool:
        """Delete a document; its embeddings go with it (ON DELETE CASCADE)."""
        _, rowcount = await self._db.execute(
            "DELETE FROM documents WHERE id = %s", (document_id,)
        )
        return rowcount > 0

    async def count(self) -> int:
        row = await self._db.fetch_one("SELECT COUNT(*) AS total FROM documents")
        return int(row["total"]) if row else 0

    async def list_without_embeddings(self, limit: int = 100) -> list[Document]:
        validate_page_window(limit, 0)
        rows = await self._db.fetch_all(
            f"""
            SELECT {DOCUMENT_COLUMNS} FROM documents d
            WHERE NOT EXISTS (SELECT 1 FROM embeddings e WHERE e.document_id = d.id)
            ORDER BY id
            LIMIT %s
            """,
            (limit,),
        )
        return [_row_to_document(r) for r in rows]


# ---------------------------------------------------------------------------
# EMBEDDING STORE
# ---------------------------------------------------------------------------


def _row_to_embedding(row: dict[str, Any]) -> Embedding:
    return Embedding(
        id=row["id"],
        document_id=row["document_id"],
        vector=np.asarray(row["embedding"], dtype=np.float32),
        model=row["model"],
        created_at=row["created_at"],
    )


class PgEmbeddingStore:
    """
    Append-only embeddings with pgvector similarity search.

    Ranking runs server-side in the ``semantic_search`` SQL function.
    """

    def __init__(self, db: PostgresDatabase, dimensions: int = 1536):
        self._db = db
        self.dimensions = dimensions

    def _as_vector(self, vector: Sequence[float]) -> np.ndarray:
        arr = np.asarray(vector, dtype=np.float32)
        if arr.ndim != 1 or arr.shape[0] != self.dimensions:
            raise DimensionMismatch(self.dimensions, arr.size)
        return arr

    async def store(self, document_id: int, vector: Sequence[float], model: str) -> Embedding:
        """Append an embedding row. Earlier rows for the document are kept."""
        row = await self._db.fetch_one(
            f"""
            INSERT INTO embeddings (document_id, embedding, model)
            VALUES (%s, %s, %s)
            RETURNING {EMBEDDING_COLUMNS}
            """,
            (document_id, self._as_vector(vector), model),
        )
        return _row_to_embedding(row)

    async def search(
        self,
        query_vector: Sequence[float],
        similarity_threshold: float,
        max_results: int,
    ) -> list[SearchResult]:
        """Rows with similarity > threshold, best first, at most max_results."""
        query = self._as_vector(query_vector)
        with start_span(
            "db.semantic_search",
            {DB_SYSTEM: SERVICE_NAME, DB_OPERATION: "semantic_search"},
        ):
            rows = await self._db.fetch_all(
                """
                SELECT id, document_id, title, content, similarity
                FROM semantic_search(%s, %s, %s)
                """,
                (query, similarity_threshold, max_results),
            )
        return [
            SearchResult(
                id=r["id"],
                document_id=r["document_id"],
                title=r["title"],
                content=r["content"],
                similarity=float(r["similarity"]),
            )
            for r in rows
        ]

    async def list_for_document(self, document_id: int) -> list[Embedding]:
        """All embeddings of a document, newest first."""
        rows = await self._db.fetch_all(
            f"""
            SELECT {EMBEDDING_COLUMNS} FROM embeddings
            WHERE document_id = %s
            ORDER BY created_at DESC, id DESC
            """,
            (document_id,),
        )
        return [_row_to_embedding(r) for r in rows]

    async def latest_for_document(self, document_id: int) -> Embedding | None:
        embeddings = await self.list_for_document(document_id)
        return embeddings[0] if embeddings else None
