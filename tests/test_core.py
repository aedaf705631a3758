"""
Unit Tests for errors, validation and the composition helpers
"""

from unittest.mock import AsyncMock, patch

import pytest

from semantic_search.config import EmbeddingConfig, Settings
from semantic_search.core.errors import (
    DimensionMismatch,
    ExternalServiceError,
    NotFoundError,
    PartialWriteError,
    ValidationError,
)
from semantic_search.core.validation import (
    MAX_METADATA_KEYS,
    require_text,
    validate_metadata,
    validate_page_window,
    validate_search_params,
)
from semantic_search.embeddings import MockEmbeddings
from semantic_search.search import SearchService, get_search_service, open_search_service
from semantic_search.storage import (
    InMemoryDatabase,
    PostgresDatabase,
    Document,
    get_stores,
)


# ---------------------------------------------------------------------------
# ERROR TESTS
# ---------------------------------------------------------------------------


class TestErrors:
    """Test the error taxonomy."""

    def test_status_codes(self):
        assert ValidationError("x").http_status == 400
        assert NotFoundError(1).http_status == 404
        assert ExternalServiceError("openai", "down").http_status == 502
        assert DimensionMismatch(3, 2).http_status == 500

    def test_to_dict(self):
        payload = ValidationError("bad", details=[{"field": "query"}]).to_dict()
        assert payload == {
            "error": "validation_error",
            "message": "bad",
            "details": [{"field": "query"}],
        }

    def test_to_dict_without_details(self):
        assert "details" not in NotFoundError(3).to_dict()

    def test_partial_write_carries_document(self):
        document = Document(id=5, title="T", content="C")
        error = PartialWriteError(document, TimeoutError("slow"))

        assert error.document is document
        assert error.details == {
            "document_id": 5,
            "action": "created",
            "cause": "TimeoutError",
        }
        assert error.message.startswith("Document 5 was created but")

    def test_partial_write_names_update(self):
        document = Document(id=5, title="T", content="C")
        error = PartialWriteError(document, TimeoutError("slow"), action="updated")

        assert error.message.startswith("Document 5 was updated but")
        assert error.details["action"] == "updated"


# ---------------------------------------------------------------------------
# VALIDATION TESTS
# ---------------------------------------------------------------------------


class TestValidation:
    """Test shared input checks."""

    @pytest.mark.parametrize("value", ["", "   ", None, 42])
    def test_require_text_rejects(self, value):
        with pytest.raises(ValidationError):
            require_text(value, "title")

    def test_metadata_none_becomes_empty(self):
        assert validate_metadata(None) == {}

    def test_metadata_nested_ok(self):
        metadata = {"tags": ["a", "b"], "source": {"url": "x", "rank": 1.5, "ok": True}}
        assert validate_metadata(metadata) == metadata

    def test_metadata_too_deep(self):
        deep = {"a": {"b": {"c": {"d": {"e": {"f": 1}}}}}}
        with pytest.raises(ValidationError):
            validate_metadata(deep)

    def test_metadata_too_many_keys(self):
        with pytest.raises(ValidationError):
            validate_metadata({f"k{i}": i for i in range(MAX_METADATA_KEYS + 1)})

    def test_metadata_too_large(self):
        with pytest.raises(ValidationError):
            validate_metadata({"blob": "x" * 20_000})

    def test_metadata_nan_rejected(self):
        with pytest.raises(ValidationError):
            validate_metadata({"score": float("nan")})

    def test_search_params(self):
        validate_search_params(0.0, 1)
        validate_search_params(1.0, 100)
        with pytest.raises(ValidationError):
            validate_search_params(0.5, True)

    @pytest.mark.parametrize("threshold", ["0.5", None, True, [0.5], float("nan")])
    def test_search_params_rejects_non_numeric_threshold(self, threshold):
        with pytest.raises(ValidationError) as exc:
            validate_search_params(threshold, 10)
        assert "similarity_threshold" in exc.value.message

    def test_page_window(self):
        validate_page_window(1, 0)
        with pytest.raises(ValidationError):
            validate_page_window(1, -1)


# ---------------------------------------------------------------------------
# FACTORY TESTS
# ---------------------------------------------------------------------------


class TestFactories:
    """Test get_stores, get_search_service and open_search_service."""

    def test_memory_stores_share_database(self):
        stores = get_stores(Settings(use_postgres=False))
        assert isinstance(stores.index, InMemoryDatabase)
        assert stores.documents._db is stores.embeddings._db

    def test_postgres_stores_share_pool_owner(self):
        stores = get_stores(Settings(), use_postgres=True)
        assert isinstance(stores.index, PostgresDatabase)
        assert stores.documents._db is stores.embeddings._db

    def test_embedding_width_follows_config(self):
        settings = Settings(embeddings=EmbeddingConfig(dimensions=64), use_postgres=False)
        assert get_stores(settings).embeddings.dimensions == 64

    def test_get_search_service(self):
        settings = Settings(use_postgres=False)
        service = get_search_service(settings, provider=MockEmbeddings(dimensions=8))
        assert isinstance(service, SearchService)
        assert service.config is settings.search

    @pytest.mark.asyncio
    async def test_open_search_service_closes_provider(self):
        settings = Settings(embeddings=EmbeddingConfig(dimensions=8), use_postgres=False)
        provider = MockEmbeddings(dimensions=8)

        with patch.object(provider, "close", AsyncMock()) as close:
            async with open_search_service(settings, provider=provider) as service:
                doc = await service.add_document_with_embedding("T", "C")
                assert doc.id == 1

        close.assert_awaited_once()
