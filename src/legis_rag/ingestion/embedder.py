"""Embedding providers and the primary/fallback chain.

Each provider is a small strategy object exposing ``name`` and
``embed(text) -> list[float]``. :class:`FallbackEmbedder` tries them in
priority order and only fails when every one of them has failed.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Protocol

from langchain_google_genai import GoogleGenerativeAIEmbeddings
from langchain_huggingface import HuggingFaceEmbeddings

from legis_rag.config import Settings, settings
from legis_rag.errors import EmbeddingError

logger = logging.getLogger(__name__)


class EmbeddingProvider(Protocol):
    """Anything that turns one text into one vector."""

    name: str

    def embed(self, text: str) -> list[float]: ...


class HuggingFaceEmbeddingProvider:
    """Local sentence-transformer model, loaded on first use."""

    def __init__(self, model_name: str = settings.embedding_model) -> None:
        self.model_name = model_name
        self.name = f"huggingface:{model_name}"
        self._client: HuggingFaceEmbeddings | None = None
        self._load_lock = threading.Lock()

    def _get_client(self) -> HuggingFaceEmbeddings:
        # embed_many calls this from several threads; load the model once.
        with self._load_lock:
            if self._client is None:
                logger.info("Loading sentence-transformer model %s", self.model_name)
                self._client = HuggingFaceEmbeddings(
                    model_name=self.model_name,
                    encode_kwargs={"normalize_embeddings": True},
                )
        return self._client

    def embed(self, text: str) -> list[float]:
        return self._get_client().embed_query(text)


class GoogleEmbeddingProvider:
    """Google generative-model embedding endpoint."""

    def __init__(
        self,
        model_name: str = settings.fallback_embedding_model,
        *,
        api_key: str = settings.google_api_key,
        dimension: int = settings.embedding_dimension,
        timeout: float = settings.request_timeout,
    ) -> None:
        self.model_name = model_name
        self.name = f"google:{model_name}"
        self._api_key = api_key
        self._dimension = dimension
        self._timeout = timeout
        self._client: GoogleGenerativeAIEmbeddings | None = None

    def _get_client(self) -> GoogleGenerativeAIEmbeddings:
        if self._client is None:
            kwargs: dict[str, Any] = {
                "model": self.model_name,
                "request_options": {"timeout": self._timeout},
            }
            if self._api_key:
                kwargs["google_api_key"] = self._api_key
            self._client = GoogleGenerativeAIEmbeddings(**kwargs)
        return self._client

    def embed(self, text: str) -> list[float]:
        return self._get_client().embed_query(text, output_dimensionality=self._dimension)


class FallbackEmbedder:
    """Try each provider in order until one returns a valid vector.

    Parameters
    ----------
    providers:
        Providers in priority order; must not be empty.
    dimension:
        Required vector length. A provider returning any other length is
        treated as failed (vectors are never padded or truncated).
    max_workers:
        Upper bound on concurrent calls in :meth:`embed_many`.
    """

    def __init__(
        self,
        providers: Sequence[EmbeddingProvider],
        *,
        dimension: int = settings.embedding_dimension,
        max_workers: int = settings.embedding_workers,
    ) -> None:
        if not providers:
            raise ValueError("FallbackEmbedder needs at least one provider")
        self.providers = list(providers)
        self.dimension = dimension
        self.max_workers = max(1, max_workers)

    def embed(self, text: str) -> list[float]:
        """Return a *dimension*-length vector for *text*.

        Raises
        ------
        EmbeddingError
            When every provider failed; the message names each failure.
        """
        failures: list[tuple[str, str]] = []
        for provider in self.providers:
            try:
                vector = list(provider.embed(text))
            except Exception as exc:
                logger.warning("Embedding provider %s failed: %s", provider.name, exc)
                failures.append((provider.name, str(exc)))
                continue

            if len(vector) != self.dimension:
                msg = f"returned dimension {len(vector)}, expected {self.dimension}"
                logger.warning("Embedding provider %s %s", provider.name, msg)
                failures.append((provider.name, msg))
                continue

            if failures:
                logger.info("Embedding served by fallback provider %s", provider.name)
            return vector

        raise EmbeddingError.from_failures(failures)

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed independent *texts* concurrently; results keep input order.

        The first failure aborts the batch: queued texts are cancelled and
        texts a worker picks up afterwards are skipped without calling any
        provider. Calls already in flight finish before the error is raised.
        """
        if not texts:
            return []

        aborted = threading.Event()

        def run(text: str) -> list[float] | None:
            if aborted.is_set():
                return None
            try:
                return self.embed(text)
            except Exception:
                aborted.set()
                raise

        workers = min(self.max_workers, len(texts))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="embed") as pool:
            futures = [pool.submit(run, text) for text in texts]
            wait(futures, return_when=FIRST_EXCEPTION)
            if aborted.is_set():
                pool.shutdown(wait=False, cancel_futures=True)
                failed = next(f for f in futures if f.done() and not f.cancelled() and f.exception())
                logger.warning("Embedding batch of %d texts aborted after a failure", len(texts))
                failed.result()
            return [f.result() for f in futures]


def build_default_embedder(config: Settings = settings) -> FallbackEmbedder:
    """Sentence-transformer first, Google embedding endpoint as fallback."""
    return FallbackEmbedder(
        [
            HuggingFaceEmbeddingProvider(config.embedding_model),
            GoogleEmbeddingProvider(
                config.fallback_embedding_model,
                api_key=config.google_api_key,
                dimension=config.embedding_dimension,
                timeout=config.request_timeout,
            ),
        ],
        dimension=config.embedding_dimension,
        max_workers=config.embedding_workers,
    )
