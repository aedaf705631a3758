"""
Unit Tests for the operation registry

Operations are exercised end to end over in-memory stores and mock
embeddings: raw params in, OperationResult out.
"""

import pytest

from semantic_search.config import SearchConfig
from semantic_search.embeddings import MockEmbeddings
from semantic_search.search import SearchService
from semantic_search.storage import (
    InMemoryDatabase,
    InMemoryDocumentStore,
    InMemoryEmbeddingStore,
)
from semantic_search.tools import (
    DEFAULT_OPERATIONS,
    Operation,
    OperationRegistry,
    build_registry,
)

DIM = 8


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def registry():
    db = InMemoryDatabase()
    service = SearchService(
        InMemoryDocumentStore(db),
        InMemoryEmbeddingStore(db, dimensions=DIM),
        MockEmbeddings(dimensions=DIM),
        index=db,
    )
    return build_registry(service)


async def _create(registry, title="Doc", content="content", metadata=None):
    params = {"title": title, "content": content}
    if metadata is not None:
        params["metadata"] = metadata
    result = await registry.invoke("createDocument", params)
    assert result.success, result.error
    return result.data


# ---------------------------------------------------------------------------
# REGISTRY TESTS
# ---------------------------------------------------------------------------


class TestOperationRegistry:
    """Test registration and discovery."""

    def test_default_operations_registered(self, registry):
        assert registry.names() == [
            "getDocuments",
            "getDocument",
            "createDocument",
            "updateDocument",
            "deleteDocument",
            "semanticSearch",
            "getDatabaseInfo",
        ]

    def test_operations_satisfy_protocol(self, registry):
        for name in registry.names():
            assert isinstance(registry.get(name), Operation)

    def test_definitions_publish_json_schema(self, registry):
        definitions = {d.name: d for d in registry.definitions()}

        search = definitions["semanticSearch"].to_dict()
        assert "query" in search["parameters"]["properties"]
        assert "similarityThreshold" in search["parameters"]["properties"]
        assert search["parameters"]["required"] == ["query"]
        assert definitions["getDocument"].parameters["required"] == ["id"]

    def test_duplicate_registration_rejected(self, registry):
        operation = registry.get("getDocument")
        with pytest.raises(ValueError):
            registry.register(operation)

    def test_empty_registry(self):
        assert OperationRegistry().names() == []
        assert len(DEFAULT_OPERATIONS) == 7

    @pytest.mark.asyncio
    async def test_unknown_operation(self, registry):
        result = await registry.invoke("dropEverything", {})
        assert result.success is False
        assert result.status_code == 400
        assert result.error["error"] == "validation_error"


# ---------------------------------------------------------------------------
# OPERATION TESTS
# ---------------------------------------------------------------------------


class TestOperations:
    """Test each operation through the registry."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, registry):
        created = await _create(registry, metadata={"category": "ai"})

        result = await registry.invoke("getDocument", {"id": str(created["id"])})

        assert result.success
        assert result.data["title"] == "Doc"
        assert result.data["metadata"] == {"category": "ai"}

    @pytest.mark.asyncio
    async def test_create_validation_error(self, registry):
        result = await registry.invoke("createDocument", {"title": "", "content": "c"})

        assert result.success is False
        assert result.status_code == 400
        assert result.to_dict()["success"] is False
        assert result.to_dict()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_get_missing(self, registry):
        result = await registry.invoke("getDocument", {"id": 404})
        assert result.status_code == 404
        assert result.error["message"] == "Document with ID 404 not found"

    @pytest.mark.asyncio
    async def test_get_documents_paginates(self, registry):
        for i in range(4):
            await _create(registry, title=f"Doc {i}")

        result = await registry.invoke("getDocuments", {"page": 2, "pageSize": 3})

        assert result.success
        assert result.data["total"] == 4
        assert result.data["total_pages"] == 2
        assert [d["title"] for d in result.data["items"]] == ["Doc 0"]

    @pytest.mark.asyncio
    async def test_update(self, registry):
        created = await _create(registry)

        result = await registry.invoke(
            "updateDocument", {"id": created["id"], "metadata": {"k": 1}}
        )

        assert result.success
        assert result.data["metadata"] == {"k": 1}
        assert result.data["title"] == "Doc"

    @pytest.mark.asyncio
    async def test_update_requires_a_field(self, registry):
        created = await _create(registry)
        result = await registry.invoke("updateDocument", {"id": created["id"]})
        assert result.status_code == 400

    @pytest.mark.asyncio
    async def test_delete(self, registry):
        created = await _create(registry)

        deleted = await registry.invoke("deleteDocument", {"id": created["id"]})
        again = await registry.invoke("deleteDocument", {"id": created["id"]})

        assert deleted.data == {"success": True}
        assert again.status_code == 404

    @pytest.mark.asyncio
    async def test_semantic_search(self, registry):
        created = await _create(registry, title="Vectors", content="pgvector")

        result = await registry.invoke(
            "semanticSearch",
            {"query": "Title: Vectors\n\nContent: pgvector", "similarityThreshold": 0.5},
        )

        assert result.success
        assert result.data["results"][0]["document_id"] == created["id"]

    @pytest.mark.asyncio
    async def test_semantic_search_empty_query(self, registry):
        result = await registry.invoke("semanticSearch", {"query": ""})
        assert result.status_code == 400

    @pytest.mark.asyncio
    async def test_database_info(self, registry):
        result = await registry.invoke("getDatabaseInfo")
        assert result.data == {"version": "in-memory", "vector_index": True}


# ---------------------------------------------------------------------------
# CONFIGURED DEFAULT TESTS
# ---------------------------------------------------------------------------


class TestConfiguredDefaults:
    """Omitted params fall back to the service's SearchConfig."""

    @pytest.fixture
    def configured(self):
        db = InMemoryDatabase()
        service = SearchService(
            InMemoryDocumentStore(db),
            InMemoryEmbeddingStore(db, dimensions=DIM),
            MockEmbeddings(dimensions=DIM),
            index=db,
            config=SearchConfig(similarity_threshold=0.5, max_results=2, page_size=2),
        )
        return build_registry(service)

    @pytest.mark.asyncio
    async def test_get_documents_uses_configured_page_size(self, configured):
        for i in range(3):
            await _create(configured, title=f"Doc {i}")

        result = await configured.invoke("getDocuments", {})

        assert result.success
        assert result.data["page_size"] == 2
        assert result.data["total_pages"] == 2
        assert len(result.data["items"]) == 2

    @pytest.mark.asyncio
    async def test_semantic_search_uses_configured_limit(self, configured):
        for _ in range(3):
            await _create(configured, title="Same", content="same text")

        result = await configured.invoke(
            "semanticSearch", {"query": "Title: Same\n\nContent: same text"}
        )

        assert result.success
        assert len(result.data["results"]) == 2

    @pytest.mark.asyncio
    async def test_explicit_params_override_config(self, configured):
        for _ in range(3):
            await _create(configured, title="Same", content="same text")

        result = await configured.invoke(
            "semanticSearch",
            {"query": "Title: Same\n\nContent: same text", "maxResults": 3},
        )

        assert len(result.data["results"]) == 3
