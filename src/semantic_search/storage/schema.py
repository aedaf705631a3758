"""
PostgreSQL schema for documents, embeddings and the similarity function.

The embedding column width is fixed at table creation. ``initialize`` is
idempotent: every statement is IF NOT EXISTS / OR REPLACE.
"""

from __future__ import annotations

import logging

from psycopg import AsyncConnection

logger = logging.getLogger(__name__)


def schema_statements(dimensions: int) -> list[str]:
    """Return the DDL statements for vectors of width ``dimensions``."""
    if dimensions < 1:
        raise ValueError(f"dimensions must be >= 1, got {dimensions}")

    return [
        "CREATE EXTENSION IF NOT EXISTS vector",
        """
        CREATE TABLE IF NOT EXISTS documents (
            id SERIAL PRIMARY KEY,
            title TEXT NOT NULL CHECK (length(title) > 0),
            content TEXT NOT NULL CHECK (length(content) > 0),
            metadata JSONB NOT NULL DEFAULT '{}'::jsonb,
            created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """,
        f"""
        CREATE TABLE IF NOT EXISTS embeddings (
            id SERIAL PRIMARY KEY,
            document_id INTEGER NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
            embedding vector({dimensions}) NOT NULL,
            model TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """,
        """
        CREATE INDEX IF NOT EXISTS embeddings_hnsw_idx ON embeddings
        USING hnsw (embedding vector_cosine_ops)
        WITH (m = 16, ef_construction = 64)
        """,
        """
        CREATE INDEX IF NOT EXISTS embeddings_document_idx
        ON embeddings (document_id, created_at DESC, id DESC)
        """,
        """
        CREATE INDEX IF NOT EXISTS documents_created_at_idx
        ON documents (created_at DESC, id DESC)
        """,
        """
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = CURRENT_TIMESTAMP;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql
        """,
        "DROP TRIGGER IF EXISTS update_documents_updated_at ON documents",
        """
        CREATE TRIGGER update_documents_updated_at
        BEFORE UPDATE ON documents
        FOR EACH ROW
        EXECUTE FUNCTION update_updated_at_column()
        """,
        # Only the newest embedding of each document is ranked; older rows
        # stay in the table as history.
        f"""
        CREATE OR REPLACE FUNCTION semantic_search(
            query_embedding vector({dimensions}),
            similarity_threshold FLOAT,
            max_results INT
        )
        RETURNS TABLE (
            id INTEGER,
            document_id INTEGER,
            title TEXT,
            content TEXT,
            similarity FLOAT
        )
        LANGUAGE sql STABLE
        AS $$
            WITH current_embeddings AS (
                SELECT DISTINCT ON (e.document_id) e.id, e.document_id, e.embedding
                FROM embeddings e
                ORDER BY e.document_id, e.created_at DESC, e.id DESC
            )
            SELECT
                c.id,
                c.document_id,
                d.title,
                d.content,
                (1 - (c.embedding <=> query_embedding))::float8 AS similarity
            FROM current_embeddings c
            JOIN documents d ON d.id = c.document_id
            WHERE 1 - (c.embedding <=> query_embedding) > similarity_threshold
            ORDER BY similarity DESC
            LIMIT max_results
        $$
        """,
    ]


async def initialize(conn: AsyncConnection, dimensions: int) -> None:
    """Create extension, tables, indexes, trigger and search function."""
    for statement in schema_statements(dimensions):
        await conn.execute(statement)
    logger.info(f"Schema initialized for {dimensions}-dimensional embeddings")
