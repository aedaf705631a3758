"""
Unit Tests for configuration loading
"""

from unittest.mock import patch

from semantic_search.config import (
    DatabaseConfig,
    EmbeddingConfig,
    SearchConfig,
    Settings,
)


class TestDatabaseConfig:
    """Test DatabaseConfig.from_env."""

    def test_database_url_wins(self):
        env = {"DATABASE_URL": "postgresql://u:p@db:5433/x", "DB_HOST": "ignored"}
        with patch.dict("os.environ", env, clear=True):
            config = DatabaseConfig.from_env()
        assert config.connection_string == "postgresql://u:p@db:5433/x"

    def test_built_from_parts(self):
        env = {
            "DB_HOST": "db",
            "DB_PORT": "6543",
            "DB_USER": "app",
            "DB_PASSWORD": "p@ss word",
            "DB_NAME": "docs",
        }
        with patch.dict("os.environ", env, clear=True):
            config = DatabaseConfig.from_env()
        assert config.connection_string == "postgresql://app:p%40ss%20word@db:6543/docs"

    def test_pool_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            config = DatabaseConfig.from_env()
        assert config.pool_max_size == 20
        assert config.pool_timeout_seconds == 2.0
        assert config.statement_timeout_ms == 30_000


class TestEmbeddingConfig:
    """Test EmbeddingConfig.from_env."""

    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            config = EmbeddingConfig.from_env()
        assert config.model == "text-embedding-3-small"
        assert config.dimensions == 1536
        assert config.max_input_chars == 8191
        assert config.api_key is None
        assert config.use_mock is False

    def test_overrides(self):
        env = {
            "OPENAI_API_KEY": "sk-test",
            "EMBEDDING_MODEL": "text-embedding-3-large",
            "EMBEDDING_DIM": "3072",
            "USE_MOCK_EMBEDDINGS": "true",
        }
        with patch.dict("os.environ", env, clear=True):
            config = EmbeddingConfig.from_env()
        assert config.api_key == "sk-test"
        assert config.dimensions == 3072
        assert config.use_mock is True


class TestSettings:
    """Test Settings aggregation."""

    def test_from_env(self):
        env = {"USE_POSTGRES": "false", "SEARCH_SIMILARITY_THRESHOLD": "0.5"}
        with patch.dict("os.environ", env, clear=True):
            settings = Settings.from_env()
        assert settings.use_postgres is False
        assert settings.search.similarity_threshold == 0.5

    def test_defaults(self):
        settings = Settings()
        assert settings.use_postgres is True
        assert settings.search == SearchConfig()
