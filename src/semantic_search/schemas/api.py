"""
Request schemas for the transport boundary.

These Pydantic models turn loosely typed input (query strings, JSON
bodies, agent tool arguments) into typed, range-checked values before
anything reaches the SearchService. Query-string numbers arrive as text;
Pydantic's lax mode coerces "0.5" and "10" to float and int.

``parse_request`` converts Pydantic's error into the package's
ValidationError so every transport reports it the same way.
"""

from __future__ import annotations

from typing import Any, TypeVar

import pydantic
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from semantic_search.core.errors import ValidationError
from semantic_search.core.validation import MAX_RESULTS, require_text, validate_metadata

ModelT = TypeVar("ModelT", bound=BaseModel)


def _check_text(value: str | None, field: str) -> str | None:
    if value is None:
        return None
    try:
        return require_text(value, field)
    except ValidationError as e:
        raise ValueError(e.message) from e


def _check_metadata(value: dict[str, Any] | None) -> dict[str, Any] | None:
    if value is None:
        return None
    try:
        return validate_metadata(value)
    except ValidationError as e:
        raise ValueError(e.message) from e


class CreateDocumentRequest(BaseModel):
    """Body of a create call."""

    title: str = Field(min_length=1, description="Document title")
    content: str = Field(min_length=1, description="Document content")
    metadata: dict[str, Any] | None = Field(
        default=None, description="Open JSON map stored with the document"
    )

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: str, info: ValidationInfo) -> str:
        return _check_text(value, info.field_name)

    @field_validator("metadata")
    @classmethod
    def json_metadata(cls, value):
        return _check_metadata(value)


class UpdateDocumentRequest(BaseModel):
    """Body of a partial update; at least one field is required."""

    title: str | None = Field(default=None, min_length=1, description="New title")
    content: str | None = Field(default=None, min_length=1, description="New content")
    metadata: dict[str, Any] | None = Field(default=None, description="Replacement metadata")

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: str | None, info: ValidationInfo) -> str | None:
        return _check_text(value, info.field_name)

    @field_validator("metadata")
    @classmethod
    def json_metadata(cls, value):
        return _check_metadata(value)

    @model_validator(mode="after")
    def at_least_one_field(self) -> "UpdateDocumentRequest":
        if self.title is None and self.content is None and self.metadata is None:
            raise ValueError(
                "At least one field (title, content, or metadata) must be provided for update"
            )
        return self


class SearchRequest(BaseModel):
    """Semantic search parameters. Accepts snake_case or camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(min_length=1, description="Search query")
    similarity_threshold: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        alias="similarityThreshold",
        description="Minimum similarity a result must exceed (0-1); defaults to the configured value",
    )
    max_results: int | None = Field(
        default=None,
        ge=1,
        le=MAX_RESULTS,
        alias="maxResults",
        description="Maximum results to return (1-100); defaults to the configured value",
    )

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query required")
        return value


class PaginationParams(BaseModel):
    """1-based page number and page size."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(default=1, ge=1, description="Page number (starts at 1)")
    page_size: int | None = Field(
        default=None,
        ge=1,
        alias="pageSize",
        description="Number of documents per page; defaults to the configured value",
    )


class DocumentIdParams(BaseModel):
    """Path parameter naming one document."""

    id: int = Field(ge=1, description="Document ID")


def parse_request(model: type[ModelT], data: Any) -> ModelT:
    """
    Validate ``data`` against ``model``.

    Raises:
        ValidationError: with one entry per violated constraint in ``details``
    """
    try:
        return model.model_validate(data if data is not None else {})
    except pydantic.ValidationError as e:
        problems = [
            {
                "field": ".".join(str(part) for part in err["loc"]) or None,
                "message": err["msg"],
            }
            for err in e.errors()
        ]
        summary = "; ".join(
            f"{p['field']}: {p['message']}" if p["field"] else p["message"] for p in problems
        )
        raise ValidationError(summary, details=problems) from e
