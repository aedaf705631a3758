"""
Error taxonomy shared by every layer.

Each error carries a stable ``kind`` and the HTTP status a transport should
map it to. ``to_dict()`` produces the structured failure description that
the operation registry and the CLI emit.

    ValidationError       caller input violates a contract        400
    NotFoundError         referenced document does not exist      404
    DimensionMismatch     vector lengths disagree                 500
    ExternalServiceError  provider or database failed/timed out   502
    PartialWriteError     document stored, embedding not stored   500
"""

from __future__ import annotations

from typing import Any


class SemanticSearchError(Exception):
    """Base class for all errors raised by the package."""

    kind = "error"
    http_status = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Structured failure description (kind + human message)."""
        payload: dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(SemanticSearchError):
    """Caller-supplied input violates a contract. Never retried."""

    kind = "validation_error"
    http_status = 400


class NotFoundError(SemanticSearchError):
    """The referenced document does not exist."""

    kind = "not_found"
    http_status = 404

    def __init__(self, document_id: int):
        super().__init__(f"Document with ID {document_id} not found")
        self.document_id = document_id


class DimensionMismatch(SemanticSearchError):
    """Vector-math precondition violated (configuration or data bug)."""

    kind = "dimension_mismatch"
    http_status = 500

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Vector dimensions do not match: expected {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual


class ExternalServiceError(SemanticSearchError):
    """The embedding provider or the database failed, timed out, or misbehaved."""

    kind = "external_service_error"
    http_status = 502

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}", details={"service": service})
        self.service = service


class PartialWriteError(SemanticSearchError):
    """The document was persisted but its embedding was not.

    The document is kept (no rollback). ``action`` is "created" or
    "updated". ``document`` holds the persisted record so the caller can
    retry the embedding or run a reindex.
    """

    kind = "partial_write"
    http_status = 500

    def __init__(self, document: Any, cause: Exception, action: str = "created"):
        document_id = getattr(document, "id", None)
        super().__init__(
            f"Document {document_id} was {action} but its embedding was not stored: {cause}",
            details={
                "document_id": document_id,
                "action": action,
                "cause": type(cause).__name__,
            },
        )
        self.document = document
        self.cause = cause
