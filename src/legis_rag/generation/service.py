"""Answer and summary generation over retrieved bill chunks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from legis_rag.errors import GenerationError
from legis_rag.generation.prompts import build_answer_prompt, build_summary_prompt

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel
    from langchain_core.messages import BaseMessage

logger = logging.getLogger(__name__)


class AnswerService:
    """Condition a chat model on chunk text to answer questions or summarize.

    Parameters
    ----------
    llm:
        Any LangChain chat model; in production the one returned by
        :func:`legis_rag.generation.llm.get_llm`.
    """

    def __init__(self, llm: BaseChatModel) -> None:
        self._llm = llm

    def answer(self, query: str, context_chunks: list[str]) -> str:
        """Answer *query* from *context_chunks*."""
        return self._generate(build_answer_prompt(query, context_chunks), "answer")

    def summarize(self, context_chunks: list[str], title: str = "") -> str:
        """Produce the five-part bill summary from *context_chunks*."""
        return self._generate(build_summary_prompt(context_chunks, title), "summary")

    def _generate(self, messages: list[BaseMessage], kind: str) -> str:
        try:
            response = self._llm.invoke(messages)
        except Exception as exc:
            raise GenerationError(f"Failed to generate {kind}: {exc}", "llm") from exc

        text = response.content if isinstance(response.content, str) else str(response.content)
        logger.info("Generated %s (%d chars)", kind, len(text))
        return text
