"""
Operations exposed to transports (HTTP handlers, agent tool protocols, CLI).

Each operation pairs a request schema with one SearchService call.
``describe()`` publishes the name, description and JSON Schema of the
parameters; ``invoke(params)`` validates the raw parameters and runs the
call. The same objects back every transport, so validation and result
shaping live here once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from semantic_search.schemas import (
    CreateDocumentRequest,
    DocumentIdParams,
    PaginationParams,
    SearchRequest,
    UpdateDocumentRequest,
    parse_request,
)

if TYPE_CHECKING:
    from semantic_search.search import SearchService


@dataclass
class OperationDefinition:
    """Transport-neutral description of an operation."""

    name: str
    description: str
    parameters: dict[str, Any]
    returns: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
            "returns": self.returns,
        }


@runtime_checkable
class Operation(Protocol):
    """Contract every registered operation implements."""

    name: str

    def describe(self) -> OperationDefinition:
        ...

    async def invoke(self, params: dict[str, Any] | None) -> Any:
        ...


class NoParams(BaseModel):
    """Operations that take no parameters."""


class UpdateDocumentParams(UpdateDocumentRequest):
    """Partial update addressed by id."""

    id: int = Field(ge=1, description="Document ID")


_DOCUMENT_RETURNS = {
    "id": "number",
    "title": "string",
    "content": "string",
    "metadata": "object",
    "created_at": "string",
    "updated_at": "string",
}


class ServiceOperation:
    """Base for operations that validate params then call the service."""

    name: str = ""
    description: str = ""
    params_model: type[BaseModel] = NoParams
    returns: dict[str, Any] = {}

    def __init__(self, service: SearchService):
        self._service = service

    def describe(self) -> OperationDefinition:
        return OperationDefinition(
            name=self.name,
            description=self.description,
            parameters=self.params_model.model_json_schema(by_alias=True),
            returns=dict(self.returns),
        )

    async def invoke(self, params: dict[str, Any] | None) -> Any:
        return await self.run(parse_request(self.params_model, params))

    async def run(self, params: Any) -> Any:
        raise NotImplementedError


class GetDocuments(ServiceOperation):
    name = "getDocuments"
    description = "Get documents with pagination"
    params_model = PaginationParams
    returns = {
        "items": "array",
        "total": "number",
        "page": "number",
        "page_size": "number",
        "total_pages": "number",
    }

    async def run(self, params: PaginationParams) -> dict:
        page = await self._service.list_documents(params.page, params.page_size)
        return page.to_dict()


class GetDocument(ServiceOperation):
    name = "getDocument"
    description = "Get a document by ID"
    params_model = DocumentIdParams
    returns = _DOCUMENT_RETURNS

    async def run(self, params: DocumentIdParams) -> dict:
        document = await self._service.get_document(params.id)
        return document.to_dict()


class CreateDocument(ServiceOperation):
    name = "createDocument"
    description = "Create a new document with embedding"
    params_model = CreateDocumentRequest
    returns = _DOCUMENT_RETURNS

    async def run(self, params: CreateDocumentRequest) -> dict:
        document = await self._service.add_document_with_embedding(
            params.title, params.content, params.metadata
        )
        return document.to_dict()


class UpdateDocument(ServiceOperation):
    name = "updateDocument"
    description = "Update a document and its embedding"
    params_model = UpdateDocumentParams
    returns = _DOCUMENT_RETURNS

    async def run(self, params: UpdateDocumentParams) -> dict:
        document = await self._service.update_document_with_embedding(
            params.id,
            title=params.title,
            content=params.content,
            metadata=params.metadata,
        )
        return document.to_dict()


class DeleteDocument(ServiceOperation):
    name = "deleteDocument"
    description = "Delete a document and its embeddings"
    params_model = DocumentIdParams
    returns = {"success": "boolean"}

    async def run(self, params: DocumentIdParams) -> dict:
        return {"success": await self._service.delete_document(params.id)}


class SemanticSearch(ServiceOperation):
    name = "semanticSearch"
    description = "Perform semantic search"
    params_model = SearchRequest
    returns = {"results": "array"}

    async def run(self, params: SearchRequest) -> dict:
        results = await self._service.semantic_search(
            params.query, params.similarity_threshold, params.max_results
        )
        return {"results": [r.to_dict() for r in results]}


class GetDatabaseInfo(ServiceOperation):
    name = "getDatabaseInfo"
    description = "Get database information"
    returns = {"version": "string", "vector_index": "boolean"}

    async def run(self, params: NoParams) -> dict:
        return await self._service.database_info()


DEFAULT_OPERATIONS: tuple[type[ServiceOperation], ...] = (
    GetDocuments,
    GetDocument,
    CreateDocument,
    UpdateDocument,
    DeleteDocument,
    SemanticSearch,
    GetDatabaseInfo,
)
