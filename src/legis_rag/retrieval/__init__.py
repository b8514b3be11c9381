"""
Retrieval — vector-store access and document-scoped similarity search.

This module wraps the vector store behind a clean interface so that the
ingestion and answering layers never need to know which DB is backing
retrieval.

Public surface
--------------
- :class:`BillRetriever` — document-scoped retrieval for question answering.
- :class:`VectorStoreBase` — abstract backend (subclass for Pinecone, etc.).
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`IndexRecord`, :class:`MetadataFilter`, :class:`RetrievalMatch` — data models.
"""

from legis_rag.retrieval.base import VectorStoreBase
from legis_rag.retrieval.models import IndexRecord, MetadataFilter, RetrievalMatch
from legis_rag.retrieval.retriever import BillRetriever

__all__ = [
    "BillRetriever",
    "ChromaVectorStore",
    "IndexRecord",
    "MetadataFilter",
    "RetrievalMatch",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from legis_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
