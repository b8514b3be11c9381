"""Explicit construction of the process-wide clients and services.

``build_services()`` is called once per process (the FastAPI app does it at
startup) and the resulting :class:`Services` is passed by reference to
whatever needs it. Nothing here is created at import time.
"""

from __future__ import annotations

from dataclasses import dataclass

from legis_rag.config import Settings, settings
from legis_rag.generation.llm import get_llm
from legis_rag.generation.service import AnswerService
from legis_rag.ingestion.embedder import FallbackEmbedder, build_default_embedder
from legis_rag.ingestion.service import IngestionService
from legis_rag.retrieval.base import VectorStoreBase
from legis_rag.retrieval.retriever import BillRetriever


@dataclass
class Services:
    """Everything a request handler needs, wired to shared clients."""

    config: Settings
    store: VectorStoreBase
    embedder: FallbackEmbedder
    answerer: AnswerService
    ingestion: IngestionService
    retriever: BillRetriever


def wire_services(
    store: VectorStoreBase,
    embedder: FallbackEmbedder,
    answerer: AnswerService,
    config: Settings = settings,
) -> Services:
    """Assemble :class:`Services` around already-built clients."""
    return Services(
        config=config,
        store=store,
        embedder=embedder,
        answerer=answerer,
        ingestion=IngestionService(store, embedder, answerer, config=config),
        retriever=BillRetriever(store, embedder, default_k=config.retrieval_top_k),
    )


def build_services(config: Settings = settings) -> Services:
    """Build the Chroma store, embedding chain and chat model from *config*."""
    from legis_rag.retrieval.chroma_store import ChromaVectorStore

    store = ChromaVectorStore(
        config.chroma_collection,
        host=config.chroma_host,
        port=config.chroma_port,
        dimension=config.embedding_dimension,
    )
    return wire_services(
        store,
        build_default_embedder(config),
        AnswerService(get_llm(config)),
        config,
    )
