"""Unit tests for the serving layer."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import InMemoryVectorStore, unit_vector
from legis_rag.config import Settings
from legis_rag.container import Services
from legis_rag.errors import DownloadError
from legis_rag.generation.service import AnswerService
from legis_rag.ingestion.embedder import FallbackEmbedder
from legis_rag.ingestion.models import ExtractedDocument
from legis_rag.ingestion.service import IngestionService
from legis_rag.retrieval.models import IndexRecord
from legis_rag.retrieval.retriever import BillRetriever
from legis_rag.serving.app import create_app

PDF_URL = "https://example.org/bills/42.pdf"

BILL_TEXT = (
    "THE OPEN DATA BILL, 2024 "
    "Section 1. Purpose. This Act requires public bodies to publish datasets in open formats. "
    "Section 2. Definitions. 'Dataset' means any collection of data held by a public body. "
    "Section 3. Publication. Every public body shall publish its datasets within ninety days."
)


def _extractor(pdf_url: str, *, timeout: float) -> ExtractedDocument:
    if pdf_url.endswith("missing.pdf"):
        raise DownloadError("Failed to download PDF: 404 Not Found")
    return ExtractedDocument(text=BILL_TEXT, page_count=2)


@pytest.fixture()
def services(
    store: InMemoryVectorStore, embedder: FallbackEmbedder, answerer: AnswerService, config: Settings
) -> Services:
    return Services(
        config=config,
        store=store,
        embedder=embedder,
        answerer=answerer,
        ingestion=IngestionService(store, embedder, answerer, config=config, extractor=_extractor),
        retriever=BillRetriever(store, embedder, default_k=config.retrieval_top_k),
    )


@pytest.fixture()
def client(services: Services) -> TestClient:
    return TestClient(create_app(services))


def test_health_endpoint(client: TestClient) -> None:
    """GET /health should return 200 with status ok."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestProcessBill:
    def test_missing_fields_rejected(self, client: TestClient) -> None:
        response = client.post("/process-bill", json={"billId": "42"})
        assert response.status_code == 400
        assert response.json() == {"error": "Bill ID and PDF URL are required"}

    def test_first_call_ingests(self, client: TestClient, store: InMemoryVectorStore) -> None:
        response = client.post("/process-bill", json={"billId": 42, "pdfUrl": PDF_URL, "title": "Open Data"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["alreadyProcessed"] is False
        assert body["summary"] == "A concise summary of the bill."
        assert body["chunksStored"] == body["totalChunks"] == len(store.records)
        assert body["originalLength"] == len(BILL_TEXT)
        assert "billTitle" not in body
        assert body["pdfMetadata"] == {"numPages": 2, "info": {}}

    def test_repeat_call_is_already_processed(self, client: TestClient, store: InMemoryVectorStore) -> None:
        payload = {"billId": "42", "pdfUrl": PDF_URL, "title": "Open Data"}
        client.post("/process-bill", json=payload)
        count = len(store.records)

        body = client.post("/process-bill", json=payload).json()

        assert body["alreadyProcessed"] is True
        assert body["billTitle"] == "Open Data"
        assert body["chunksStored"] == count
        assert "lastProcessed" in body
        assert "pdfMetadata" not in body
        assert len(store.records) == count

    def test_download_failure_reports_stage(self, client: TestClient, store: InMemoryVectorStore) -> None:
        response = client.post(
            "/process-bill",
            json={"billId": "7", "pdfUrl": "https://example.org/missing.pdf"},
        )
        assert response.status_code == 502
        assert response.json() == {"error": "Failed to download PDF: 404 Not Found", "stage": "download"}
        assert store.records == {}


class TestChat:
    def test_missing_fields_rejected(self, client: TestClient) -> None:
        response = client.post("/chat", json={"message": "hello"})
        assert response.status_code == 400
        assert response.json() == {"error": "Message and bill ID are required"}

    def test_answer_with_sources(self, client: TestClient, store: InMemoryVectorStore) -> None:
        store.upsert(
            [
                IndexRecord(
                    id="42-chunk-0",
                    vector=unit_vector(0),
                    content="x" * 300,
                    metadata={"document_id": "42", "chunk_index": 0, "total_chunks": 2},
                ),
                IndexRecord(
                    id="42-chunk-1",
                    vector=unit_vector(0, 0.5, 3),
                    content="Every public body shall publish its datasets.",
                    metadata={"document_id": "42", "chunk_index": 1, "total_chunks": 2},
                ),
                IndexRecord(
                    id="9-chunk-0",
                    vector=unit_vector(0),
                    content="another bill",
                    metadata={"document_id": "9", "chunk_index": 0, "total_chunks": 1},
                ),
            ]
        )

        response = client.post("/chat", json={"message": "What must be published?", "billId": 42})

        assert response.status_code == 200
        body = response.json()
        assert body["response"] == "A concise summary of the bill."
        assert body["billId"] == "42"
        assert [s["chunkIndex"] for s in body["sources"]] == [0, 1]
        assert body["sources"][0]["content"] == "x" * 200 + "..."
        assert body["sources"][0]["score"] == pytest.approx(1.0)
        assert body["sources"][0]["score"] >= body["sources"][1]["score"]

    def test_unknown_bill_answers_without_sources(self, client: TestClient) -> None:
        body = client.post("/chat", json={"message": "Anything?", "billId": "404"}).json()
        assert body["sources"] == []
        assert body["response"] == "A concise summary of the bill."


class TestBillSummary:
    def test_missing_bill_id_rejected(self, client: TestClient) -> None:
        response = client.get("/bill-summary")
        assert response.status_code == 400
        assert response.json() == {"error": "Bill ID is required"}

    def test_unseen_bill(self, client: TestClient) -> None:
        body = client.get("/bill-summary", params={"billId": "999"}).json()
        assert body["hasData"] is False
        assert body["summary"] is None
        assert body["message"] == "Bill not yet processed or no data available"

    def test_ingested_bill(self, client: TestClient) -> None:
        client.post("/process-bill", json={"billId": "42", "pdfUrl": PDF_URL, "title": "Open Data"})
        body = client.get("/bill-summary", params={"billId": "42"}).json()
        assert body == {
            "billId": "42",
            "hasData": True,
            "title": "Open Data",
            "summary": "A concise summary of the bill.",
        }


def test_analyze_bill(client: TestClient, store: InMemoryVectorStore) -> None:
    response = client.post("/analyze-bill", json={"billId": "42", "pdfUrl": PDF_URL, "title": "Open Data"})

    assert response.status_code == 200
    body = response.json()
    assert body["billId"] == "42"
    assert body["pageCount"] == 2
    assert body["totalLength"] == len(BILL_TEXT)
    assert body["sections"]["title"] == "THE OPEN DATA BILL"
    assert len(body["sections"]["provisions"]) == 3
    assert store.records == {}
