"""
Semantic Conventions for Span Attributes

Defines attribute keys following OpenTelemetry GenAI and database
conventions plus a custom ``search`` namespace.

Reference: https://opentelemetry.io/docs/specs/semconv/gen-ai/
"""

# ---------------------------------------------------------------------------
# GENAI NAMESPACE (OTel standard)
# ---------------------------------------------------------------------------

GEN_AI_SYSTEM = "gen_ai.system"  # "openai", "mock"
GEN_AI_OPERATION_NAME = "gen_ai.operation.name"  # "embeddings"
GEN_AI_REQUEST_MODEL = "gen_ai.request.model"  # "text-embedding-3-small"
GEN_AI_USAGE_INPUT_TOKENS = "gen_ai.usage.input_tokens"


# ---------------------------------------------------------------------------
# DB NAMESPACE (OTel standard)
# ---------------------------------------------------------------------------

DB_SYSTEM = "db.system"  # "postgresql", "memory"
DB_OPERATION = "db.operation"  # "insert", "select", "semantic_search"


# ---------------------------------------------------------------------------
# SEARCH NAMESPACE (custom)
# ---------------------------------------------------------------------------

SEARCH_OPERATION = "search.operation"  # "semantic_search", "add_document", ...
SEARCH_THRESHOLD = "search.similarity_threshold"
SEARCH_MAX_RESULTS = "search.max_results"
SEARCH_RESULT_COUNT = "search.result_count"
SEARCH_TOP_SIMILARITY = "search.top_similarity"
SEARCH_DOCUMENT_ID = "search.document_id"
SEARCH_CHANGED_FIELDS = "search.changed_fields"  # list of field names
SEARCH_EMBEDDING_REGENERATED = "search.embedding_regenerated"  # bool
SEARCH_BATCH_SIZE = "search.batch_size"
SEARCH_TRUNCATED_INPUTS = "search.truncated_inputs"  # count


# ---------------------------------------------------------------------------
# HELPER FUNCTIONS
# ---------------------------------------------------------------------------


def embedding_attributes(
    system: str,
    model: str,
    batch_size: int = 1,
    truncated: int = 0,
) -> dict:
    """Create attributes dict for an embedding request span."""
    attrs = {
        GEN_AI_SYSTEM: system,
        GEN_AI_OPERATION_NAME: "embeddings",
        GEN_AI_REQUEST_MODEL: model,
        SEARCH_BATCH_SIZE: batch_size,
    }
    if truncated:
        attrs[SEARCH_TRUNCATED_INPUTS] = truncated
    return attrs


def search_attributes(
    threshold: float,
    max_results: int,
    result_count: int | None = None,
    top_similarity: float | None = None,
) -> dict:
    """Create attributes dict for a semantic search span."""
    attrs = {
        SEARCH_OPERATION: "semantic_search",
        SEARCH_THRESHOLD: threshold,
        SEARCH_MAX_RESULTS: max_results,
    }
    if result_count is not None:
        attrs[SEARCH_RESULT_COUNT] = result_count
    if top_similarity is not None:
        attrs[SEARCH_TOP_SIMILARITY] = top_similarity
    return attrs


def update_attributes(
    document_id: int,
    changed_fields: list[str],
    regenerated: bool,
) -> dict:
    """Create attributes dict for a document update span."""
    return {
        SEARCH_OPERATION: "update_document",
        SEARCH_DOCUMENT_ID: document_id,
        SEARCH_CHANGED_FIELDS: changed_fields,
        SEARCH_EMBEDDING_REGENERATED: regenerated,
    }
