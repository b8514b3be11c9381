"""Abstract base class for vector-store backends.

Adding a new backend (Pinecone, Qdrant …) only requires subclassing
:class:`VectorStoreBase` and implementing the abstract methods. The
ingestion and retrieval services are backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from legis_rag.retrieval.models import IndexRecord, MetadataFilter


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    dimension:
        Vector length every stored and query vector must have.
    """

    def __init__(self, collection_name: str, dimension: int = 768) -> None:
        self.collection_name = collection_name
        self.dimension = dimension

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def similarity_search(
        self,
        query_embedding: list[float],
        *,
        k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[dict[str, Any]]:
        """Return the top-*k* results matching *query_embedding*.

        Each result dict **must** contain at least:

        * ``"id"`` – chunk identifier
        * ``"content"`` – the textual content
        * ``"score"`` – similarity score (higher = more similar)
        * ``"metadata"`` – associated metadata dict

        Results are ordered by descending score.

        Raises
        ------
        StoreError
            When the backend query fails.
        """
        ...

    @abstractmethod
    def fetch(
        self,
        *,
        filters: list[MetadataFilter] | None = None,
        limit: int = 10,
        include_content: bool = True,
    ) -> list[dict[str, Any]]:
        """Return up to *limit* stored records matching *filters*, without ranking.

        Result dicts have the same keys as :meth:`similarity_search` minus
        ``"score"``; ``"content"`` is empty when *include_content* is false.
        """
        ...

    @abstractmethod
    def upsert(self, records: list[IndexRecord]) -> int:
        """Insert or overwrite *records* by id in one batch; return the count written."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...

    # -- helpers --------------------------------------------------------------

    def _check_dimension(self, vector: list[float]) -> None:
        if len(vector) != self.dimension:
            raise ValueError(
                f"Vector dimension {len(vector)} does not match index dimension {self.dimension}"
            )
