"""
Generation — chat-model answers and bill summaries.

Public API
----------
- :class:`AnswerService` — ``answer(query, chunks)`` and ``summarize(chunks, title)``.
- :func:`get_llm` — build the configured chat model.
"""

from legis_rag.generation.llm import get_llm
from legis_rag.generation.service import AnswerService

__all__ = [
    "AnswerService",
    "get_llm",
]
