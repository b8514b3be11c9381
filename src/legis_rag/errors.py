"""Exception hierarchy for the ingestion and retrieval pipeline.

Every error carries the pipeline ``stage`` it belongs to, so callers (the
HTTP layer in particular) can tell the user *where* a request failed::

    LegisRagError
    +-- DownloadError     (fetching the source PDF)
    +-- ExtractionError   (parsing the PDF / empty text)
    +-- EmbeddingError    (every provider in the fallback chain failed)
    +-- StoreError        (vector-store query or upsert)
    +-- GenerationError   (chat-model call)

None of these are retried inside the core.
"""

from __future__ import annotations


class LegisRagError(Exception):
    """Base class for all pipeline errors.

    Parameters
    ----------
    message:
        Human-readable description of the failure.
    provider_name:
        Optional name of the external service that failed; prefixed in
        ``str(exc)`` as ``[provider] message``.
    """

    stage: str = "pipeline"

    def __init__(self, message: str, provider_name: str | None = None) -> None:
        self.message = message
        self.provider_name = provider_name
        super().__init__(message)

    def __str__(self) -> str:
        if self.provider_name:
            return f"[{self.provider_name}] {self.message}"
        return self.message


class DownloadError(LegisRagError):
    """Non-2xx response or network failure while fetching a document."""

    stage = "download"


class ExtractionError(LegisRagError):
    """The downloaded bytes are not a readable PDF, or yield no text."""

    stage = "extraction"


class EmbeddingError(LegisRagError):
    """All embedding providers failed.

    ``failures`` holds one ``(provider_name, error_message)`` pair per
    provider that was tried, in the order they were tried.
    """

    stage = "embedding"

    def __init__(self, message: str, failures: list[tuple[str, str]] | None = None) -> None:
        super().__init__(message)
        self.failures = failures or []

    @classmethod
    def from_failures(cls, failures: list[tuple[str, str]]) -> EmbeddingError:
        detail = ", ".join(f"{name}: {msg}" for name, msg in failures)
        return cls(f"Embedding generation failed - {detail}", failures=failures)


class StoreError(LegisRagError):
    """A vector-store query or upsert failed."""

    stage = "store"


class GenerationError(LegisRagError):
    """The generative model call failed."""

    stage = "generation"
