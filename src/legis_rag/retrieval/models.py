"""Domain models for vector-store records, filters and retrieval matches."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class MetadataFilter(BaseModel):
    """Declarative metadata filter for vector-store queries.

    Attributes
    ----------
    field:
        The metadata key to filter on (e.g. ``"document_id"``).
    operator:
        Comparison operator — one of ``eq``, ``ne``, ``gt``, ``gte``,
        ``lt``, ``lte``, ``in``, ``nin``.
    value:
        The value (or list of values for ``in`` / ``nin``) to compare against.
    """

    field: str
    operator: str = "eq"
    value: Any = None

    # -- helpers for common filters ------------------------------------------

    @classmethod
    def equals(cls, field: str, value: Any) -> MetadataFilter:
        return cls(field=field, operator="eq", value=value)

    @classmethod
    def for_document(cls, document_id: str) -> MetadataFilter:
        """Exact-match filter scoping a query to one document."""
        return cls.equals("document_id", str(document_id))


class IndexRecord(BaseModel):
    """One row written to the vector store.

    ``metadata`` values must be flat ``str`` / ``int`` / ``float`` /
    ``bool``; ``None`` values are dropped by the backends.
    """

    id: str
    vector: list[float]
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class RetrievalMatch(BaseModel):
    """A stored chunk returned for a query, with its similarity score.

    Attributes
    ----------
    chunk_id:
        The vector-store ID of the chunk.
    score:
        Similarity reported by the store (higher = more similar).
    content:
        Full chunk text, for context assembly.
    metadata:
        Stored metadata of the chunk.
    """

    chunk_id: str
    score: float
    content: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def document_id(self) -> str | None:
        value = self.metadata.get("document_id")
        return None if value is None else str(value)

    @property
    def chunk_index(self) -> int:
        return int(self.metadata.get("chunk_index", 0))

    @property
    def total_chunks(self) -> int:
        return int(self.metadata.get("total_chunks", 1))

    @property
    def source(self) -> str:
        return self.metadata.get("source", "pdf")

    def preview(self, length: int = 200) -> str:
        """Content truncated to *length* characters for display."""
        if len(self.content) <= length:
            return self.content
        return self.content[:length] + "..."
