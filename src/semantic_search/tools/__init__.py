"""
Tools module - transport-neutral operations and their registry.
"""

from semantic_search.tools.operations import (
    Operation,
    OperationDefinition,
    ServiceOperation,
    DEFAULT_OPERATIONS,
)
from semantic_search.tools.registry import (
    OperationRegistry,
    OperationResult,
    build_registry,
)

__all__ = [
    "Operation",
    "OperationDefinition",
    "ServiceOperation",
    "DEFAULT_OPERATIONS",
    "OperationRegistry",
    "OperationResult",
    "build_registry",
]
