"""
Unit Tests for the PostgreSQL DDL
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from semantic_search.storage.schema import initialize, schema_statements


class TestSchemaStatements:
    """Test schema_statements."""

    def test_vector_width_applied(self):
        ddl = "\n".join(schema_statements(768))
        assert "vector(768)" in ddl
        assert "query_embedding vector(768)" in ddl

    def test_extension_created_first(self):
        assert schema_statements(3)[0] == "CREATE EXTENSION IF NOT EXISTS vector"

    def test_hnsw_cosine_index(self):
        ddl = "\n".join(schema_statements(3))
        assert "USING hnsw (embedding vector_cosine_ops)" in ddl
        assert "m = 16, ef_construction = 64" in ddl

    def test_cascade_delete(self):
        ddl = "\n".join(schema_statements(3))
        assert "REFERENCES documents(id) ON DELETE CASCADE" in ddl

    def test_search_function_ranks_newest_embedding(self):
        function = schema_statements(3)[-1]
        assert "DISTINCT ON (e.document_id)" in function
        assert "> similarity_threshold" in function
        assert "LIMIT max_results" in function

    def test_rejects_zero_width(self):
        with pytest.raises(ValueError):
            schema_statements(0)


class TestInitialize:
    """Test initialize."""

    @pytest.mark.asyncio
    async def test_executes_every_statement(self):
        conn = MagicMock()
        conn.execute = AsyncMock()

        await initialize(conn, 3)

        assert conn.execute.await_count == len(schema_statements(3))
