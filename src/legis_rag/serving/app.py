"""FastAPI application exposing bill ingestion, chat and summaries as a REST API."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from legis_rag.config import settings
from legis_rag.container import Services, build_services
from legis_rag.errors import LegisRagError

logger = logging.getLogger(__name__)


# ── Request / Response schemas ────────────────────────────────────────
class _CamelRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("bill_id", mode="before", check_fields=False)
    @classmethod
    def _stringify_bill_id(cls, value: object) -> object:
        # Bill ids arrive as numbers or strings; the store keys them as strings.
        return None if value is None else str(value)


class ProcessBillRequest(_CamelRequest):
    """A bill to ingest."""

    bill_id: str | None = None
    pdf_url: str | None = None
    title: str = ""


class ChatRequest(_CamelRequest):
    """A question about one bill."""

    message: str | None = None
    bill_id: str | None = None


class SourceRef(BaseModel):
    """A retrieved chunk cited in a chat answer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    score: float
    chunk_index: int
    content: str


class ChatResponse(BaseModel):
    """Answer returned for a chat question."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    response: str
    sources: list[SourceRef] = []
    bill_id: str


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": message})


def create_app(services: Services | None = None) -> FastAPI:
    """Build the API; *services* defaults to :func:`build_services` at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logging.basicConfig(level=settings.log_level)
        if getattr(app.state, "services", None) is None:
            app.state.services = build_services()
        yield

    app = FastAPI(
        title="Legislative Bill RAG API",
        version="0.1.0",
        description="Ingest bill PDFs, then ask questions about them.",
        lifespan=lifespan,
    )
    app.state.services = services

    @app.exception_handler(LegisRagError)
    async def pipeline_error(request: Request, exc: LegisRagError) -> JSONResponse:
        logger.error("%s failed at stage %s: %s", request.url.path, exc.stage, exc)
        return JSONResponse(status_code=502, content={"error": str(exc), "stage": exc.stage})

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    @app.post("/process-bill")
    def process_bill(body: ProcessBillRequest, request: Request) -> JSONResponse:
        """Ingest a bill (once) and return its summary."""
        if not body.bill_id or not body.pdf_url:
            return _bad_request("Bill ID and PDF URL are required")
        svc: Services = request.app.state.services
        result = svc.ingestion.ingest(body.bill_id, body.pdf_url, body.title)
        return JSONResponse(content=result.to_response())

    @app.post("/chat")
    def chat(body: ChatRequest, request: Request) -> JSONResponse:
        """Answer a question from the bill's most relevant chunks."""
        if not body.message or not body.bill_id:
            return _bad_request("Message and bill ID are required")
        svc: Services = request.app.state.services
        matches = svc.retriever.retrieve(body.message, body.bill_id, svc.config.retrieval_top_k)
        answer = svc.answerer.answer(body.message, [m.content for m in matches])
        sources = [
            SourceRef(score=m.score, chunk_index=m.chunk_index, content=m.preview(svc.config.preview_length))
            for m in matches
        ]
        response = ChatResponse(response=answer, sources=sources, bill_id=body.bill_id)
        return JSONResponse(content=response.model_dump(by_alias=True))

    @app.get("/bill-summary")
    def bill_summary(request: Request, bill_id: str | None = Query(default=None, alias="billId")) -> JSONResponse:
        """Report whether a bill is stored, with its stored summary."""
        if not bill_id:
            return _bad_request("Bill ID is required")
        svc: Services = request.app.state.services
        return JSONResponse(content=svc.ingestion.status(bill_id).to_response())

    @app.post("/analyze-bill")
    def analyze_bill(body: ProcessBillRequest, request: Request) -> JSONResponse:
        """Break a bill's text into title, preamble, provisions and definitions."""
        if not body.bill_id or not body.pdf_url:
            return _bad_request("Bill ID and PDF URL are required")
        svc: Services = request.app.state.services
        analysis = svc.ingestion.analyze(body.bill_id, body.pdf_url, body.title)
        return JSONResponse(content=analysis.to_response())

    return app


app = create_app()
