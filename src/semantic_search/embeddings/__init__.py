"""
Embeddings module - text embedding generation.

1. Protocol (EmbeddingProvider, in core) defines the interface
2. Production implementation (OpenAIEmbeddings)
3. Test double (MockEmbeddings) for fast testing
4. Factory function (get_embedding_provider)
"""

from semantic_search.embeddings.openai_embeddings import (
    MAX_INPUT_CHARS,
    OpenAIEmbeddings,
    MockEmbeddings,
    get_embedding_provider,
    truncate_text,
    document_embedding_input,
)

__all__ = [
    "MAX_INPUT_CHARS",
    "OpenAIEmbeddings",
    "MockEmbeddings",
    "get_embedding_provider",
    "truncate_text",
    "document_embedding_input",
]
