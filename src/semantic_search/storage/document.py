"""
Record types for the retrieval system.

Single responsibility: define the shape of documents, embeddings and
search hits as they come out of a store. Stores build these; the
orchestrator and the transport layer consume them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import numpy as np


@dataclass
class Document:
    """A persisted document. ``metadata`` is always a dict, never None."""

    id: int
    title: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "metadata": self.metadata,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class Embedding:
    """One embedding row. A document may own several; the newest is current."""

    id: int
    document_id: int
    vector: np.ndarray
    model: str
    created_at: datetime | None = None

    @property
    def dimensions(self) -> int:
        return len(self.vector)

    def to_dict(self) -> dict:
        # The vector itself is left out; 1536 floats are noise in a response.
        return {
            "id": self.id,
            "document_id": self.document_id,
            "model": self.model,
            "dimensions": self.dimensions,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass
class SearchResult:
    """A ranked hit. ``similarity`` is 1 - cosine distance, higher is better."""

    id: int
    document_id: int
    title: str
    content: str
    similarity: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "document_id": self.document_id,
            "title": self.title,
            "content": self.content,
            "similarity": self.similarity,
        }
