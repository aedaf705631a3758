"""
Sample corpus for a fresh database.

Seven short articles spread over a few categories, enough to see
semantic ranking at work ("how do I find similar text?" should surface
the search and embeddings articles well above the TypeScript one).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from semantic_search.storage.document import Document

if TYPE_CHECKING:
    from semantic_search.search import SearchService

logger = logging.getLogger(__name__)


def get_sample_documents() -> list[dict[str, Any]]:
    """Title, content and metadata of each sample document."""
    return [
        {
            "title": "Introduction to Vector Databases",
            "content": (
                "Vector databases are specialized database systems designed to store and query "
                "high-dimensional vectors. These vectors typically represent embeddings of data "
                "such as text, images, audio, or video. Vector databases excel at similarity "
                "search, finding items that are semantically similar to a query. This makes "
                "them a good fit for semantic search, recommendation systems, and AI-powered "
                "applications."
            ),
            "metadata": {
                "category": "technology",
                "tags": ["vector database", "embeddings", "similarity search"],
            },
        },
        {
            "title": "PostgreSQL and pgvector",
            "content": (
                "PostgreSQL is an open-source relational database with decades of active "
                "development. pgvector is a PostgreSQL extension that adds vector similarity "
                "search. With pgvector, embeddings live next to the rest of your data and can "
                "be compared using Euclidean distance, cosine distance, or inner product. It "
                "also provides approximate indexes such as HNSW (Hierarchical Navigable Small "
                "World) for faster searches."
            ),
            "metadata": {
                "category": "technology",
                "tags": ["postgresql", "pgvector", "database extensions"],
            },
        },
        {
            "title": "Model Context Protocol (MCP)",
            "content": (
                "The Model Context Protocol (MCP) is a standard for connecting AI assistants to "
                "the systems where data lives. MCP bridges AI models and external tools or data "
                "sources such as content repositories, business tools, and development "
                "environments. Assistants can then work with context-specific information and "
                "give more relevant answers, without a custom integration per data source."
            ),
            "metadata": {
                "category": "AI",
                "tags": ["mcp", "ai assistants", "model context protocol"],
            },
        },
        {
            "title": "Embeddings in Natural Language Processing",
            "content": (
                "Embeddings are dense vector representations of words, phrases, or documents. "
                "In natural language processing they capture semantic relationships: text with "
                "similar meaning ends up with similar vectors. Common embedding models include "
                "Word2Vec, GloVe, and transformer models like BERT and GPT. Embeddings underpin "
                "text classification, sentiment analysis, and semantic search."
            ),
            "metadata": {
                "category": "AI",
                "tags": ["nlp", "embeddings", "vector representations"],
            },
        },
        {
            "title": "Semantic Search Implementation",
            "content": (
                "Semantic search goes beyond keyword matching by modelling the intent and "
                "meaning of a query. Both the query and the documents are converted into "
                "embeddings, and documents are compared by conceptual similarity rather than "
                "exact word matches. Similarity between the query vector and each document "
                "vector is usually measured with cosine similarity, and results are ranked by "
                "that score."
            ),
            "metadata": {
                "category": "implementation",
                "tags": ["semantic search", "vector search", "similarity metrics"],
            },
        },
        {
            "title": "TypeScript for Backend Development",
            "content": (
                "TypeScript is a strongly typed language that builds on JavaScript by adding "
                "static type definitions. On the backend it brings type checking, code "
                "completion, and fewer runtime errors. Popular choices include NestJS, Express "
                "with TypeScript, and Deno. The type system catches many errors during "
                "development rather than in production."
            ),
            "metadata": {
                "category": "programming",
                "tags": ["typescript", "backend", "web development"],
            },
        },
        {
            "title": "Building AI-Powered Applications",
            "content": (
                "AI-powered applications integrate machine learning models, natural language "
                "processing, or computer vision to improve what software can do. Their key "
                "components are data preparation, model selection or training, deployment, and "
                "monitoring. Many applications call external AI services over an API for "
                "language understanding or image recognition. Data privacy and bias need as "
                "much attention as the technical side."
            ),
            "metadata": {
                "category": "AI",
                "tags": ["ai applications", "machine learning", "application development"],
            },
        },
    ]


async def seed_documents(service: SearchService) -> list[Document]:
    """
    Add every sample document through ``service``, embedding each one.

    Works with any store backend the service was built with.
    """
    created = []
    for sample in get_sample_documents():
        logger.info(f"Adding document: {sample['title']}")
        created.append(
            await service.add_document_with_embedding(
                sample["title"], sample["content"], sample["metadata"]
            )
        )
    logger.info(f"Seeded {len(created)} documents")
    return created
