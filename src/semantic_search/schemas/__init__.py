"""
Schemas module - typed request models for the transport boundary.
"""

from semantic_search.schemas.api import (
    CreateDocumentRequest,
    UpdateDocumentRequest,
    SearchRequest,
    PaginationParams,
    DocumentIdParams,
    parse_request,
)

__all__ = [
    "CreateDocumentRequest",
    "UpdateDocumentRequest",
    "SearchRequest",
    "PaginationParams",
    "DocumentIdParams",
    "parse_request",
]
