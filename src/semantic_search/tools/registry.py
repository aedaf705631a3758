"""
OperationRegistry - name -> Operation mapping shared by all transports.

``invoke`` never lets a package error escape: the outcome is an
OperationResult holding either the data or the structured error and the
HTTP status a web transport should answer with.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable

from semantic_search.core.errors import SemanticSearchError, ValidationError
from semantic_search.tools.operations import (
    DEFAULT_OPERATIONS,
    Operation,
    OperationDefinition,
)

if TYPE_CHECKING:
    from semantic_search.search import SearchService

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    """Result-or-error value returned by the registry."""

    success: bool
    data: Any = None
    error: dict[str, Any] | None = None
    status_code: int = 200

    def to_dict(self) -> dict:
        if self.success:
            return {"success": True, "data": self.data}
        return {"success": False, **(self.error or {})}


class OperationRegistry:
    """Registry of operations addressable by name."""

    def __init__(self, operations: Iterable[Operation] = ()):
        self._operations: dict[str, Operation] = {}
        for operation in operations:
            self.register(operation)

    def register(self, operation: Operation) -> None:
        if operation.name in self._operations:
            raise ValueError(f"Operation already registered: {operation.name}")
        self._operations[operation.name] = operation

    def get(self, name: str) -> Operation:
        try:
            return self._operations[name]
        except KeyError:
            raise ValidationError(
                f"Unknown operation: {name}",
                details={"available": sorted(self._operations)},
            ) from None

    def names(self) -> list[str]:
        return list(self._operations)

    def definitions(self) -> list[OperationDefinition]:
        return [op.describe() for op in self._operations.values()]

    async def invoke(self, name: str, params: dict[str, Any] | None = None) -> OperationResult:
        """Run one operation, mapping package errors to a failed result."""
        try:
            operation = self.get(name)
            data = await operation.invoke(params)
        except SemanticSearchError as e:
            logger.warning(f"Operation {name} failed: {e.kind}: {e.message}")
            return OperationResult(success=False, error=e.to_dict(), status_code=e.http_status)
        return OperationResult(success=True, data=data)


def build_registry(service: SearchService) -> OperationRegistry:
    """Registry holding the default operations bound to ``service``."""
    return OperationRegistry(op(service) for op in DEFAULT_OPERATIONS)
