"""
Composition root: build a SearchService from Settings.

There is no process-wide instance. Callers either hold the returned
service themselves or use ``open_search_service`` to tie it to a scope.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from semantic_search.config import Settings
from semantic_search.core.protocols import EmbeddingProvider
from semantic_search.embeddings import get_embedding_provider
from semantic_search.search.service import SearchService
from semantic_search.storage import Stores, get_stores

logger = logging.getLogger(__name__)


def get_search_service(
    settings: Settings | None = None,
    stores: Stores | None = None,
    provider: EmbeddingProvider | None = None,
) -> SearchService:
    """
    Factory function to wire stores and provider into a SearchService.

    Args:
        settings: Process settings (defaults to Settings())
        stores: Pre-built stores (built from settings if not provided)
        provider: Embedding provider (built from settings if not provided)
    """
    settings = settings or Settings()
    stores = stores or get_stores(settings)
    provider = provider or get_embedding_provider(settings.embeddings)
    return SearchService(
        documents=stores.documents,
        embeddings=stores.embeddings,
        provider=provider,
        index=stores.index,
        config=settings.search,
    )


@asynccontextmanager
async def open_search_service(
    settings: Settings | None = None,
    provider: EmbeddingProvider | None = None,
) -> AsyncIterator[SearchService]:
    """
    Connect the stores, probe for vector support, and close on exit.
    """
    settings = settings or Settings()
    stores = get_stores(settings)
    provider = provider or get_embedding_provider(settings.embeddings)
    service = get_search_service(settings, stores=stores, provider=provider)

    await stores.connect()
    try:
        await service.check_vector_support()
        yield service
    finally:
        await stores.close()
        close = getattr(provider, "close", None)
        if close is not None:
            await close()
        logger.debug("Search service closed")
