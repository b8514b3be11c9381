"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import math
from typing import Any
from unittest.mock import MagicMock

import pytest
from langchain_core.messages import AIMessage

from legis_rag.config import Settings
from legis_rag.generation.service import AnswerService
from legis_rag.ingestion.embedder import FallbackEmbedder
from legis_rag.retrieval.base import VectorStoreBase
from legis_rag.retrieval.models import IndexRecord, MetadataFilter

DIM = 768


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ──────────────────────────────────────────────────────────────


def unit_vector(axis: int, weight: float = 1.0, spill: int | None = None) -> list[float]:
    """A DIM-length vector pointing along *axis*, optionally leaning toward *spill*."""
    vec = [0.0] * DIM
    vec[axis] = weight
    if spill is not None:
        vec[spill] = 1.0 - weight
    return vec


def _matches(meta: dict[str, Any], f: MetadataFilter) -> bool:
    value = meta.get(f.field)
    if f.operator == "eq":
        return value == f.value
    if f.operator == "ne":
        return value != f.value
    if f.operator == "in":
        return value in f.value
    if value is None:
        return False
    return {
        "lt": value < f.value,
        "lte": value <= f.value,
        "gt": value > f.value,
        "gte": value >= f.value,
    }[f.operator]


def _cosine(a: list[float], b: list[float]) -> float:
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    if norm == 0:
        return 0.0
    return sum(x * y for x, y in zip(a, b)) / norm


class InMemoryVectorStore(VectorStoreBase):
    """Exact cosine search over a dict of records."""

    def __init__(self, dimension: int = DIM) -> None:
        super().__init__("test-collection", dimension)
        self.records: dict[str, IndexRecord] = {}
        self.upsert_calls = 0

    def _filtered(self, filters: list[MetadataFilter] | None) -> list[IndexRecord]:
        return [r for r in self.records.values() if all(_matches(r.metadata, f) for f in filters or [])]

    def similarity_search(
        self,
        query_embedding: list[float],
        *,
        k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[dict[str, Any]]:
        self._check_dimension(query_embedding)
        scored = [
            {"id": r.id, "content": r.content, "score": _cosine(query_embedding, r.vector), "metadata": dict(r.metadata)}
            for r in self._filtered(filters)
        ]
        scored.sort(key=lambda h: h["score"], reverse=True)
        return scored[:k]

    def fetch(
        self,
        *,
        filters: list[MetadataFilter] | None = None,
        limit: int = 10,
        include_content: bool = True,
    ) -> list[dict[str, Any]]:
        return [
            {"id": r.id, "content": r.content if include_content else "", "metadata": dict(r.metadata)}
            for r in self._filtered(filters)[:limit]
        ]

    def upsert(self, records: list[IndexRecord]) -> int:
        self.upsert_calls += 1
        for rec in records:
            self._check_dimension(rec.vector)
            self.records[rec.id] = rec
        return len(records)

    def health_check(self) -> bool:
        return True


class StaticProvider:
    """Embedding provider returning a fixed vector (or raising)."""

    def __init__(self, name: str, vector: list[float] | None = None, error: Exception | None = None) -> None:
        self.name = name
        self.vector = vector if vector is not None else unit_vector(0)
        self.error = error
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return list(self.vector)


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture()
def config() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture()
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def embedder() -> FallbackEmbedder:
    return FallbackEmbedder([StaticProvider("static")], dimension=DIM, max_workers=2)


@pytest.fixture()
def llm() -> MagicMock:
    fake = MagicMock()
    fake.invoke.return_value = AIMessage(content="A concise summary of the bill.")
    return fake


@pytest.fixture()
def answerer(llm: MagicMock) -> AnswerService:
    return AnswerService(llm)
