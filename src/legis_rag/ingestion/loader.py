"""PDF loader — download a bill by URL and pull out its text."""

from __future__ import annotations

import io
import logging

import pypdf
import requests

from legis_rag.config import settings
from legis_rag.errors import DownloadError, ExtractionError
from legis_rag.ingestion.models import ExtractedDocument

logger = logging.getLogger(__name__)


def download_pdf(pdf_url: str, *, timeout: float | None = None) -> bytes:
    """Fetch the raw bytes at *pdf_url*.

    Raises
    ------
    DownloadError
        On a network failure or a non-2xx response.
    """
    timeout = settings.request_timeout if timeout is None else timeout
    try:
        resp = requests.get(pdf_url, timeout=timeout)
    except requests.RequestException as exc:
        raise DownloadError(f"Failed to download PDF from {pdf_url}: {exc}") from exc

    if not resp.ok:
        raise DownloadError(f"Failed to download PDF: {resp.status_code} {resp.reason}")

    logger.info("Downloaded PDF buffer size: %d bytes", len(resp.content))
    return resp.content


def parse_pdf(data: bytes) -> ExtractedDocument:
    """Extract page text and document info from PDF *data*.

    Raises
    ------
    ExtractionError
        When the bytes are not a readable PDF or contain no text.
    """
    try:
        reader = pypdf.PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
        info = {str(k).lstrip("/"): str(v) for k, v in (reader.metadata or {}).items()}
    except Exception as exc:
        raise ExtractionError(f"Could not parse PDF: {exc}") from exc

    text = "\n".join(pages)
    if not text.strip():
        raise ExtractionError("No text content extracted from PDF")

    logger.info("Extracted %d characters from %d pages", len(text), len(pages))
    return ExtractedDocument(text=text, page_count=len(pages), info=info, byte_length=len(data))


def extract_pdf(pdf_url: str, *, timeout: float | None = None) -> ExtractedDocument:
    """Download the PDF at *pdf_url* and return its text plus page/document info."""
    return parse_pdf(download_pdf(pdf_url, timeout=timeout))
