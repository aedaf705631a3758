"""
Core module - shared protocols, value types and errors.

USAGE:
------
from semantic_search.core import EmbeddingProvider, ValidationError

class MyProvider:
    '''Implements EmbeddingProvider protocol.'''
    ...
"""

from semantic_search.core.errors import (
    SemanticSearchError,
    ValidationError,
    NotFoundError,
    DimensionMismatch,
    ExternalServiceError,
    PartialWriteError,
)
from semantic_search.core.protocols import (
    # Protocols
    EmbeddingProvider,
    DocumentStore,
    EmbeddingStore,
    VectorIndex,
    # Data classes
    EmbeddingResult,
)

__all__ = [
    # Protocols
    "EmbeddingProvider",
    "DocumentStore",
    "EmbeddingStore",
    "VectorIndex",
    # Data classes
    "EmbeddingResult",
    # Errors
    "SemanticSearchError",
    "ValidationError",
    "NotFoundError",
    "DimensionMismatch",
    "ExternalServiceError",
    "PartialWriteError",
]
