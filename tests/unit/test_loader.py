"""Unit tests for PDF download and text extraction."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from legis_rag.errors import DownloadError, ExtractionError
from legis_rag.ingestion.loader import extract_pdf, parse_pdf

PDF_URL = "https://example.org/bills/42.pdf"


def _mock_reader(page_texts: list[str | None], info: dict | None = None) -> MagicMock:
    """Return a mock PdfReader with pages that yield the given texts."""
    pages = []
    for text in page_texts:
        page = MagicMock()
        page.extract_text.return_value = text
        pages.append(page)
    reader = MagicMock()
    reader.pages = pages
    reader.metadata = info
    return reader


def _response(status: int = 200, content: bytes = b"%PDF-1.7 ...", reason: str = "OK") -> MagicMock:
    resp = MagicMock()
    resp.ok = 200 <= status < 300
    resp.status_code = status
    resp.reason = reason
    resp.content = content
    return resp


class TestDownload:
    def test_non_success_status_raises_download_error(self) -> None:
        with patch("legis_rag.ingestion.loader.requests.get", return_value=_response(404, reason="Not Found")):
            with pytest.raises(DownloadError, match="404 Not Found"):
                extract_pdf(PDF_URL)

    def test_network_failure_raises_download_error(self) -> None:
        with patch(
            "legis_rag.ingestion.loader.requests.get",
            side_effect=requests.ConnectionError("connection refused"),
        ):
            with pytest.raises(DownloadError, match="connection refused") as exc_info:
                extract_pdf(PDF_URL)
        assert exc_info.value.stage == "download"

    def test_timeout_is_forwarded(self) -> None:
        with (
            patch("legis_rag.ingestion.loader.requests.get", return_value=_response()) as mock_get,
            patch("legis_rag.ingestion.loader.pypdf") as mock_pypdf,
        ):
            mock_pypdf.PdfReader.return_value = _mock_reader(["Section 1. Purpose."])
            extract_pdf(PDF_URL, timeout=5)
        mock_get.assert_called_once_with(PDF_URL, timeout=5)


class TestExtraction:
    def test_returns_text_pages_and_info(self) -> None:
        reader = _mock_reader(
            ["Section 1. Purpose.", None, "Section 2. Definitions."],
            info={"/Title": "The Example Bill", "/Author": "Ministry"},
        )
        with (
            patch("legis_rag.ingestion.loader.requests.get", return_value=_response(content=b"x" * 10)),
            patch("legis_rag.ingestion.loader.pypdf") as mock_pypdf,
        ):
            mock_pypdf.PdfReader.return_value = reader
            doc = extract_pdf(PDF_URL)

        assert doc.page_count == 3
        assert "Section 1. Purpose." in doc.text
        assert "Section 2. Definitions." in doc.text
        assert doc.info == {"Title": "The Example Bill", "Author": "Ministry"}
        assert doc.byte_length == 10

    def test_unparseable_bytes_raise_extraction_error(self) -> None:
        with pytest.raises(ExtractionError) as exc_info:
            parse_pdf(b"this is not a pdf at all")
        assert exc_info.value.stage == "extraction"

    def test_empty_text_raises_extraction_error(self) -> None:
        with patch("legis_rag.ingestion.loader.pypdf") as mock_pypdf:
            mock_pypdf.PdfReader.return_value = _mock_reader(["", "   ", None])
            with pytest.raises(ExtractionError, match="No text content"):
                parse_pdf(b"%PDF")
