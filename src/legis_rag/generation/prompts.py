"""Prompt templates for bill question answering and summarization.

Keeping prompts in one place makes them easy to audit and version.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage


def join_context(chunks: list[str]) -> str:
    """Join chunk texts into one context block separated by blank lines."""
    return "\n\n".join(c for c in chunks if c)


# ── 1. Question answering ─────────────────────────────────────────────

ANSWER_SYSTEM = """\
You are an assistant that explains parliamentary bills to citizens.
Answer questions using the provided excerpts of the bill.
"""


def build_answer_prompt(query: str, chunks: list[str]) -> list[BaseMessage]:
    """Build the prompt for :meth:`AnswerService.answer`."""
    user_msg = (
        f"Context from bill documents:\n{join_context(chunks)}\n\n"
        f"User question: {query}\n\n"
        "Please provide a comprehensive answer based on the context provided above. "
        "If the context doesn't contain enough information to answer the question, "
        "please mention that and provide what information you can based on the "
        "available context."
    )
    return [
        SystemMessage(content=ANSWER_SYSTEM),
        HumanMessage(content=user_msg),
    ]


# ── 2. Bill summary ───────────────────────────────────────────────────

SUMMARY_SYSTEM = """\
You summarize parliamentary bills for a general audience. Be accurate,
structured and accessible; do not invent provisions that are not in the text.
"""


def build_summary_prompt(chunks: list[str], title: str = "") -> list[BaseMessage]:
    """Build the five-part summary prompt for :meth:`AnswerService.summarize`."""
    heading = f"Bill title: {title}\n\n" if title else ""
    user_msg = (
        "Please provide a comprehensive summary of this parliamentary bill. Include:\n"
        "1. Main purpose and objectives\n"
        "2. Key provisions\n"
        "3. Potential impact\n"
        "4. Important dates or timelines mentioned\n"
        "5. Any notable changes or amendments\n\n"
        f"{heading}"
        f"Bill content:\n{join_context(chunks)}\n\n"
        "Provide a well-structured summary that's informative yet accessible."
    )
    return [
        SystemMessage(content=SUMMARY_SYSTEM),
        HumanMessage(content=user_msg),
    ]
