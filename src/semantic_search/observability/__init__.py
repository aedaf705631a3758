"""
Observability module - OpenTelemetry spans for search operations.

Exporting is configured by the host process (any OTel SDK setup works);
this package only creates spans and names their attributes.
"""

from semantic_search.observability.tracer import get_tracer, start_span
from semantic_search.observability.attributes import (
    GEN_AI_SYSTEM,
    GEN_AI_REQUEST_MODEL,
    SEARCH_OPERATION,
    SEARCH_RESULT_COUNT,
    SEARCH_TOP_SIMILARITY,
    SEARCH_DOCUMENT_ID,
    SEARCH_EMBEDDING_REGENERATED,
    embedding_attributes,
    search_attributes,
    update_attributes,
)

__all__ = [
    # Tracer
    "get_tracer",
    "start_span",
    # Attributes
    "GEN_AI_SYSTEM",
    "GEN_AI_REQUEST_MODEL",
    "SEARCH_OPERATION",
    "SEARCH_RESULT_COUNT",
    "SEARCH_TOP_SIMILARITY",
    "SEARCH_DOCUMENT_ID",
    "SEARCH_EMBEDDING_REGENERATED",
    # Helpers
    "embedding_attributes",
    "search_attributes",
    "update_attributes",
]
