"""
Ingestion — PDF extraction, chunking, and embedding into the vector store.

This module is responsible for the pipeline that turns a bill's PDF URL
into sentence-aligned, embedded chunks stored in the vector database,
at most once per bill.
"""

from legis_rag.ingestion.chunker import chunk_text, clean_text
from legis_rag.ingestion.embedder import FallbackEmbedder
from legis_rag.ingestion.loader import extract_pdf
from legis_rag.ingestion.service import IngestionService

__all__ = [
    "FallbackEmbedder",
    "IngestionService",
    "chunk_text",
    "clean_text",
    "extract_pdf",
]
