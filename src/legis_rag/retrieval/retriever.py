"""Bill retriever — document-scoped semantic search.

Usage::

    from legis_rag.container import build_services

    services = build_services()
    matches = services.retriever.retrieve("Who does the bill apply to?", "42")
    for m in matches:
        print(m.chunk_index, round(m.score, 3), m.preview(80))
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from legis_rag.retrieval.models import MetadataFilter, RetrievalMatch

if TYPE_CHECKING:
    from legis_rag.ingestion.embedder import FallbackEmbedder
    from legis_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


class BillRetriever:
    """Embed a query and return the most similar chunks of one bill.

    Parameters
    ----------
    store:
        A concrete vector-store backend (read-only use).
    embedder:
        Embedding chain used for the query text.
    default_k:
        Default number of results returned by :meth:`retrieve`.
    score_threshold:
        Minimum similarity score; when set, results below it are discarded.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: FallbackEmbedder,
        *,
        default_k: int = 5,
        score_threshold: float | None = None,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self.default_k = default_k
        self.score_threshold = score_threshold

    # -- public API -----------------------------------------------------------

    def retrieve(
        self,
        query: str,
        document_id: str,
        top_k: int | None = None,
    ) -> list[RetrievalMatch]:
        """Return up to *top_k* chunks of *document_id* most similar to *query*.

        Returns
        -------
        list[RetrievalMatch]
            Ordered by descending score; empty when the bill has no chunks.

        Raises
        ------
        ValueError
            If *top_k* is less than 1.
        """
        document_id = str(document_id)
        k = self.default_k if top_k is None else top_k
        if k < 1:
            raise ValueError(f"top_k must be >= 1, got {k}")
        embedding = self._embedder.embed(query)
        raw_hits = self._store.similarity_search(
            embedding,
            k=k,
            filters=[MetadataFilter.for_document(document_id)],
        )
        matches = self._to_matches(raw_hits, document_id)
        logger.info("Retrieved %d chunks of bill %s for %r", len(matches), document_id, query)
        return matches

    # -- internals ------------------------------------------------------------

    def _to_matches(self, raw_hits: list[dict[str, Any]], document_id: str) -> list[RetrievalMatch]:
        matches: list[RetrievalMatch] = []
        for hit in raw_hits:
            match = RetrievalMatch(
                chunk_id=hit["id"],
                score=hit.get("score", 0.0),
                content=hit.get("content") or hit.get("metadata", {}).get("content", ""),
                metadata=hit.get("metadata", {}),
            )
            if match.document_id != document_id:
                logger.error(
                    "Store returned chunk %s of bill %s for a query scoped to %s; dropping it",
                    match.chunk_id,
                    match.document_id,
                    document_id,
                )
                continue
            if self.score_threshold is not None and match.score < self.score_threshold:
                continue
            matches.append(match)

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches
