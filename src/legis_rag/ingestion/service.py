"""Ingestion service — idempotent extract → chunk → embed → upsert pipeline.

A bill moves from *unseen* to *exists* exactly once: :meth:`IngestionService.ingest`
first checks the store for any record of the bill and, if there is one,
only re-summarizes the stored content instead of ingesting again.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from legis_rag.config import Settings, settings
from legis_rag.errors import ExtractionError
from legis_rag.ingestion.chunker import build_chunks, clean_text
from legis_rag.ingestion.loader import extract_pdf
from legis_rag.ingestion.models import (
    BillAnalysis,
    BillStatus,
    ExtractedDocument,
    IngestionResult,
    PdfMetadata,
)
from legis_rag.ingestion.sections import extract_bill_sections
from legis_rag.retrieval.models import IndexRecord, MetadataFilter

if TYPE_CHECKING:
    from legis_rag.generation.service import AnswerService
    from legis_rag.ingestion.embedder import FallbackEmbedder
    from legis_rag.ingestion.models import BillChunk
    from legis_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)

Extractor = Callable[..., ExtractedDocument]


class DocumentLocks:
    """Per-document locks so one process never ingests the same bill twice at once.

    This only covers a single process; separate workers can still race
    between the existence check and the upsert. An entry lives only while
    some caller holds or waits for its lock.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._users: Counter[str] = Counter()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, document_id: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(document_id, threading.Lock())
            self._users[document_id] += 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[document_id] -= 1
                if self._users[document_id] == 0:
                    del self._users[document_id]
                    del self._locks[document_id]


class IngestionService:
    """Owns the write path into the vector store.

    Parameters
    ----------
    store:
        Vector-store backend records are written to.
    embedder:
        Embedding chain used for chunk content.
    answerer:
        Generates the bill summary returned with every result.
    config:
        Chunking and limit settings.
    extractor:
        ``extractor(pdf_url, timeout=...) -> ExtractedDocument``; defaults
        to :func:`legis_rag.ingestion.loader.extract_pdf`.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: FallbackEmbedder,
        answerer: AnswerService,
        *,
        config: Settings = settings,
        extractor: Extractor = extract_pdf,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._answerer = answerer
        self._config = config
        self._extractor = extractor
        self._locks = DocumentLocks()

    # -- public API -----------------------------------------------------------

    def ingest(self, document_id: str, pdf_url: str, title: str = "") -> IngestionResult:
        """Ingest a bill unless it is already stored, and summarize it.

        Any :class:`~legis_rag.errors.LegisRagError` aborts the call; calling
        again after a failure repeats the whole pipeline.
        """
        document_id = str(document_id)
        with self._locks.hold(document_id):
            existing = self._store.fetch(
                filters=[MetadataFilter.for_document(document_id)],
                limit=self._config.existing_count_limit,
                include_content=False,
            )
            logger.info("Bill %s exists in store: %s", document_id, bool(existing))
            if existing:
                return self._summarize_existing(document_id, title, existing)
            return self._ingest_fresh(document_id, pdf_url, title)

    def status(self, document_id: str) -> BillStatus:
        """Report whether *document_id* is stored, with its stored title and summary."""
        document_id = str(document_id)
        records = self._store.fetch(
            filters=[MetadataFilter.for_document(document_id)],
            limit=1,
            include_content=False,
        )
        if not records:
            return BillStatus(
                bill_id=document_id,
                has_data=False,
                message="Bill not yet processed or no data available",
            )
        meta = records[0]["metadata"]
        return BillStatus(
            bill_id=document_id,
            has_data=True,
            title=meta.get("title"),
            summary=meta.get("summary"),
        )

    def analyze(self, document_id: str, pdf_url: str, title: str = "") -> BillAnalysis:
        """Extract a bill and break its text into sections; nothing is stored."""
        extracted = self._extractor(pdf_url, timeout=self._config.request_timeout)
        cleaned = clean_text(extracted.text)
        return BillAnalysis(
            bill_id=str(document_id),
            title=title,
            total_length=len(cleaned),
            page_count=extracted.page_count,
            sections=extract_bill_sections(cleaned),
            extracted_at=datetime.now(timezone.utc),
        )

    # -- internals ------------------------------------------------------------

    def _summarize_existing(
        self,
        document_id: str,
        title: str,
        existing: list[dict[str, Any]],
    ) -> IngestionResult:
        first = min(existing, key=lambda r: r["metadata"].get("chunk_index", 0))["metadata"]
        stored_title = first.get("title") or title

        records = self._store.fetch(
            filters=[
                MetadataFilter.for_document(document_id),
                MetadataFilter(field="chunk_index", operator="lt", value=self._config.existing_summary_chunks),
            ],
            limit=self._config.existing_summary_chunks,
        )
        records.sort(key=lambda r: r["metadata"].get("chunk_index", 0))
        context = [r["content"] for r in records if r["content"]]
        summary = self._answerer.summarize(context, title or stored_title)

        return IngestionResult(
            message=f"Bill {document_id} already exists in database",
            chunks_stored=len(existing),
            summary=summary,
            already_processed=True,
            bill_title=stored_title,
            last_processed=first.get("timestamp"),
        )

    def _ingest_fresh(self, document_id: str, pdf_url: str, title: str) -> IngestionResult:
        logger.info("Starting PDF processing for bill %s", document_id)
        extracted = self._extractor(pdf_url, timeout=self._config.request_timeout)

        chunks = build_chunks(
            document_id,
            title,
            pdf_url,
            extracted,
            chunk_size=self._config.chunk_size,
            overlap_chars=self._config.chunk_overlap,
            min_length=self._config.min_chunk_length,
        )
        if not chunks:
            raise ExtractionError(f"PDF for bill {document_id} produced no usable chunks")
        logger.info("Created %d chunks from %d pages", len(chunks), extracted.page_count)

        vectors = self._embedder.embed_many([c.content for c in chunks])

        # Summarize before writing so a failed generation leaves nothing stored.
        summary = self._answerer.summarize(
            [c.content for c in chunks[: self._config.summary_context_chunks]],
            title,
        )

        stored = self._store.upsert(self._to_records(chunks, vectors, summary))
        logger.info("Successfully processed bill %s with %d chunks stored", document_id, stored)

        return IngestionResult(
            message=f"Successfully processed bill {document_id} with full content chunking",
            chunks_stored=stored,
            total_chunks=len(chunks),
            original_length=len(extracted.text),
            summary=summary,
            already_processed=False,
            pdf_metadata=PdfMetadata.from_extracted(extracted),
        )

    @staticmethod
    def _to_records(chunks: list[BillChunk], vectors: list[list[float]], summary: str) -> list[IndexRecord]:
        timestamp = datetime.now(timezone.utc).isoformat()
        return [
            IndexRecord(
                id=chunk.id,
                vector=vector,
                content=chunk.content,
                metadata={**chunk.flat_metadata(), "timestamp": timestamp, "summary": summary},
            )
            for chunk, vector in zip(chunks, vectors, strict=True)
        ]
