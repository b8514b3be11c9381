"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from typing import Any

import chromadb

from legis_rag.config import settings
from legis_rag.errors import StoreError
from legis_rag.retrieval.base import VectorStoreBase
from legis_rag.retrieval.models import IndexRecord, MetadataFilter

logger = logging.getLogger(__name__)

_OP_MAP = {
    "eq": "$eq",
    "ne": "$ne",
    "gt": "$gt",
    "gte": "$gte",
    "lt": "$lt",
    "lte": "$lte",
    "in": "$in",
    "nin": "$nin",
}


def _build_chroma_where(filters: list[MetadataFilter]) -> dict[str, Any] | None:
    """Convert a list of :class:`MetadataFilter` to Chroma ``where`` syntax."""
    if not filters:
        return None

    clauses: list[dict[str, Any]] = []
    for f in filters:
        chroma_op = _OP_MAP.get(f.operator)
        if chroma_op is None:
            raise ValueError(f"Unsupported filter operator: {f.operator!r}")
        clauses.append({f.field: {chroma_op: f.value}})

    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def _flatten_metadata(meta: dict[str, Any]) -> dict[str, str | int | float | bool]:
    """Chroma metadata values must be flat str/int/float/bool."""
    return {k: v for k, v in meta.items() if isinstance(v, (str, int, float, bool))}


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store using cosine distance.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    dimension:
        Required embedding dimension.
    client:
        Pre-built Chroma client; when omitted an ``HttpClient`` is created.
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        dimension: int = settings.embedding_dimension,
        client: Any = None,
    ) -> None:
        super().__init__(collection_name, dimension)
        self._host = host
        self._port = port
        try:
            self._client = client or chromadb.HttpClient(host=host, port=port)
            self._collection = self._client.get_or_create_collection(
                collection_name,
                metadata={"hnsw:space": "cosine"},
            )
        except Exception as exc:
            raise StoreError(f"Could not open collection {collection_name!r}: {exc}", "chroma") from exc

    # -- VectorStoreBase overrides --------------------------------------------

    def similarity_search(
        self,
        query_embedding: list[float],
        *,
        k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[dict[str, Any]]:
        self._check_dimension(query_embedding)
        where = _build_chroma_where(filters) if filters else None

        try:
            results = self._collection.query(
                query_embeddings=[query_embedding],
                n_results=k,
                where=where,
                include=["documents", "metadatas", "distances"],
            )
        except Exception as exc:
            raise StoreError(f"Query failed: {exc}", "chroma") from exc

        hits: list[dict[str, Any]] = []
        ids = (results.get("ids") or [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        for chunk_id, content, meta, dist in zip(ids, docs, metas, distances):
            # Cosine distance is 1 - cosine similarity.
            hits.append(
                {
                    "id": chunk_id,
                    "content": content or "",
                    "score": 1.0 - dist,
                    "metadata": meta or {},
                }
            )
        return hits

    def fetch(
        self,
        *,
        filters: list[MetadataFilter] | None = None,
        limit: int = 10,
        include_content: bool = True,
    ) -> list[dict[str, Any]]:
        where = _build_chroma_where(filters) if filters else None
        include = ["documents", "metadatas"] if include_content else ["metadatas"]

        try:
            results = self._collection.get(where=where, limit=limit, include=include)
        except Exception as exc:
            raise StoreError(f"Fetch failed: {exc}", "chroma") from exc

        ids = results.get("ids") or []
        docs = results.get("documents") or [None] * len(ids)
        metas = results.get("metadatas") or [None] * len(ids)
        return [
            {"id": chunk_id, "content": content or "", "metadata": meta or {}}
            for chunk_id, content, meta in zip(ids, docs, metas)
        ]

    def upsert(self, records: list[IndexRecord]) -> int:
        if not records:
            return 0
        for rec in records:
            self._check_dimension(rec.vector)

        try:
            self._collection.upsert(
                ids=[r.id for r in records],
                embeddings=[r.vector for r in records],
                documents=[r.content for r in records],
                metadatas=[_flatten_metadata(r.metadata) for r in records],
            )
        except Exception as exc:
            raise StoreError(f"Upsert of {len(records)} records failed: {exc}", "chroma") from exc

        logger.info("Upserted %d vectors into collection %r", len(records), self.collection_name)
        return len(records)

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
