"""Text chunking — sentence-aligned segments with a word-based overlap."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from legis_rag.ingestion.models import BillChunk, ChunkMetadata

if TYPE_CHECKING:
    from legis_rag.ingestion.models import ExtractedDocument

_WHITESPACE_RE = re.compile(r"\s+")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_SPACES_RE = re.compile(r" +")
# A sentence is a run of non-terminal characters plus its terminal punctuation.
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]*")


def clean_text(text: str) -> str:
    """Collapse whitespace and line breaks to single spaces and drop control chars."""
    text = _WHITESPACE_RE.sub(" ", text)
    text = _CONTROL_RE.sub("", text)
    return _SPACES_RE.sub(" ", text).strip()


def split_sentences(text: str) -> list[str]:
    """Split *text* on ``.``, ``!`` and ``?``, keeping the punctuation attached.

    Units that are empty once punctuation is removed are discarded.
    """
    sentences: list[str] = []
    for match in _SENTENCE_RE.findall(text):
        sentence = match.strip()
        if sentence.rstrip(".!?").strip():
            sentences.append(sentence)
    return sentences


def chunk_text(
    text: str,
    chunk_size: int = 1000,
    overlap_chars: int = 200,
    min_length: int = 50,
) -> list[str]:
    """Greedily pack sentences into chunks of at most *chunk_size* characters.

    When a sentence would overflow the current chunk, the chunk is closed
    and the next one is seeded with the last ``overlap_chars // 10`` words
    of the closed chunk. The overlap is therefore a word-count
    approximation of the character budget, not an exact slice.

    A single sentence longer than *chunk_size* is never split, so such a
    chunk may exceed the limit. Chunks of *min_length* characters or fewer
    are dropped.

    Parameters
    ----------
    text:
        Input text; it is passed through :func:`clean_text` first.
    chunk_size:
        Soft upper bound on characters per chunk.
    overlap_chars:
        Character budget for the overlap between consecutive chunks.
    min_length:
        Chunks whose length is not greater than this are discarded.

    Returns
    -------
    list[str]
        Chunks in document order.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")
    if overlap_chars < 0:
        raise ValueError("overlap_chars must be >= 0")

    overlap_words = overlap_chars // 10
    chunks: list[str] = []
    current = ""

    for sentence in split_sentences(clean_text(text)):
        if current and len(current) + len(sentence) > chunk_size:
            chunks.append(current)
            tail = current.split(" ")[-overlap_words:] if overlap_words else []
            current = " ".join([*tail, sentence])
        else:
            current = f"{current} {sentence}" if current else sentence

    if current:
        chunks.append(current)

    return [c for c in chunks if len(c) > min_length]


def build_chunks(
    document_id: str,
    title: str,
    pdf_url: str,
    extracted: ExtractedDocument,
    *,
    chunk_size: int = 1000,
    overlap_chars: int = 200,
    min_length: int = 50,
) -> list[BillChunk]:
    """Clean and chunk *extracted* text into indexed :class:`BillChunk` objects."""
    texts = chunk_text(
        extracted.text,
        chunk_size=chunk_size,
        overlap_chars=overlap_chars,
        min_length=min_length,
    )
    extracted_at = datetime.now(timezone.utc)
    return [
        BillChunk(
            id=BillChunk.make_id(document_id, i),
            document_id=document_id,
            title=title,
            content=content,
            chunk_index=i,
            total_chunks=len(texts),
            metadata=ChunkMetadata(
                source_url=pdf_url,
                page_count=extracted.page_count,
                extracted_at=extracted_at,
                chunk_byte_length=len(content.encode("utf-8")),
            ),
        )
        for i, content in enumerate(texts)
    ]
