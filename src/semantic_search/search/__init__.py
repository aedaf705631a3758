"""
Search module - orchestration of embedding generation and storage.

This module provides:
- SearchService: semantic search and embedding-aware writes
- Page: pagination result
- get_search_service() / open_search_service(): composition helpers
"""

from semantic_search.search.service import Page, SearchService
from semantic_search.search.factory import get_search_service, open_search_service

__all__ = [
    "Page",
    "SearchService",
    "get_search_service",
    "open_search_service",
]
