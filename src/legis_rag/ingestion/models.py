"""Domain models produced by the ingestion pipeline."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CHUNKING_METHOD = "sentence-based-overlap"


class ExtractedDocument(BaseModel):
    """Raw text pulled out of a downloaded PDF.

    Attributes
    ----------
    text:
        Page texts joined with newlines, before cleaning.
    page_count:
        Number of pages in the PDF.
    info:
        The PDF document-info dictionary (``/Title``, ``/Author`` …) with
        string values.
    byte_length:
        Size of the downloaded file in bytes.
    """

    text: str
    page_count: int
    info: dict[str, str] = Field(default_factory=dict)
    byte_length: int = 0


class ChunkMetadata(BaseModel):
    """Provenance attached to every chunk of a document."""

    source: str = "pdf"
    source_url: str
    page_count: int
    extracted_at: datetime
    chunk_byte_length: int
    chunking_method: str = CHUNKING_METHOD


class BillChunk(BaseModel):
    """One sentence-aligned segment of a bill, the unit of embedding and retrieval."""

    id: str
    document_id: str
    title: str
    content: str
    chunk_index: int
    total_chunks: int
    metadata: ChunkMetadata

    @staticmethod
    def make_id(document_id: str, index: int) -> str:
        return f"{document_id}-chunk-{index}"

    def flat_metadata(self) -> dict[str, Any]:
        """Chunk fields flattened into scalar values for the vector store."""
        meta = self.metadata.model_dump(mode="json")
        return {
            "document_id": self.document_id,
            "title": self.title,
            "chunk_index": self.chunk_index,
            "total_chunks": self.total_chunks,
            **meta,
        }


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_response(self) -> dict[str, Any]:
        """JSON body for API callers: camelCase keys, unset optionals dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class PdfMetadata(_CamelModel):
    """Page count and document-info dictionary of an ingested PDF."""

    num_pages: int
    info: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_extracted(cls, extracted: ExtractedDocument) -> PdfMetadata:
        return cls(num_pages=extracted.page_count, info=extracted.info)


class IngestionResult(_CamelModel):
    """Outcome of :meth:`IngestionService.ingest`.

    ``pdf_metadata`` is only set on a fresh ingestion.
    """

    success: bool = True
    message: str
    chunks_stored: int
    total_chunks: int | None = None
    original_length: int | None = None
    summary: str
    already_processed: bool
    bill_title: str | None = None
    last_processed: str | None = None
    pdf_metadata: PdfMetadata | None = None


class BillStatus(_CamelModel):
    """Whether a bill has been ingested, and its stored summary."""

    bill_id: str
    has_data: bool
    title: str | None = None
    summary: str | None = None
    message: str | None = None

    def to_response(self) -> dict[str, Any]:
        # ``summary`` stays in the body as an explicit null for unseen bills.
        body = super().to_response()
        body.setdefault("summary", None)
        return body


class BillSections(BaseModel):
    """Structural pieces recognised in a bill's text."""

    title: str = ""
    preamble: str = ""
    provisions: list[str] = Field(default_factory=list)
    definitions: str = ""


class BillAnalysis(_CamelModel):
    """Section analysis of a bill, computed without touching the store."""

    bill_id: str
    title: str
    total_length: int
    page_count: int
    sections: BillSections
    extracted_at: datetime
