"""
Input checks shared by the stores, the orchestrator and the API schemas.

Every failure raises ValidationError naming the violated constraint.
"""

from __future__ import annotations

import json
from typing import Any

from semantic_search.core.errors import ValidationError

MAX_METADATA_DEPTH = 5
MAX_METADATA_KEYS = 64
MAX_METADATA_BYTES = 16_384

MIN_THRESHOLD, MAX_THRESHOLD = 0.0, 1.0
MIN_RESULTS, MAX_RESULTS = 1, 100


def require_text(value: Any, field: str) -> str:
    """Reject missing, non-string, empty or whitespace-only text."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", details={"field": field})
    return value


def _check_json_value(value: Any, depth: int, path: str) -> None:
    if depth > MAX_METADATA_DEPTH:
        raise ValidationError(
            f"metadata nested deeper than {MAX_METADATA_DEPTH} levels at '{path}'"
        )
    if value is None or isinstance(value, (str, bool, int, float)):
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            _check_json_value(item, depth + 1, f"{path}[{i}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValidationError(f"metadata keys must be strings (at '{path}')")
            _check_json_value(item, depth + 1, f"{path}.{key}" if path else key)
        return
    raise ValidationError(
        f"metadata value at '{path}' is not JSON-representable ({type(value).__name__})"
    )


def validate_metadata(metadata: Any) -> dict[str, Any]:
    """
    Check that ``metadata`` is a string-keyed JSON map within size bounds.

    ``None`` becomes an empty dict.
    """
    if metadata is None:
        return {}
    if not isinstance(metadata, dict):
        raise ValidationError("metadata must be an object")
    if len(metadata) > MAX_METADATA_KEYS:
        raise ValidationError(f"metadata may hold at most {MAX_METADATA_KEYS} keys")

    _check_json_value(metadata, 1, "")

    try:
        size = len(json.dumps(metadata, allow_nan=False).encode())
    except ValueError as e:
        raise ValidationError(f"metadata is not valid JSON: {e}") from e
    if size > MAX_METADATA_BYTES:
        raise ValidationError(
            f"metadata is {size} bytes, limit is {MAX_METADATA_BYTES}"
        )
    return metadata


def validate_search_params(similarity_threshold: float, max_results: int) -> None:
    if (
        isinstance(similarity_threshold, bool)
        or not isinstance(similarity_threshold, (int, float))
        or not MIN_THRESHOLD <= similarity_threshold <= MAX_THRESHOLD
    ):
        raise ValidationError(
            "similarity_threshold must be a number between 0 and 1",
            details={"similarity_threshold": similarity_threshold},
        )
    if isinstance(max_results, bool) or not isinstance(max_results, int) or not (
        MIN_RESULTS <= max_results <= MAX_RESULTS
    ):
        raise ValidationError(
            "max_results must be an integer between 1 and 100",
            details={"max_results": max_results},
        )


def validate_page_window(limit: int, offset: int) -> None:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValidationError("limit must be a positive integer", details={"limit": limit})
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise ValidationError("offset must be a non-negative integer", details={"offset": offset})
