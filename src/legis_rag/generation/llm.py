"""LLM initialisation — single place to swap providers.

Supports two modes:

1. **OpenAI cloud** (default) — set ``OPENAI_API_KEY``.
2. **OpenAI-compatible endpoint** — set ``LLM_BASE_URL`` to a self-hosted
   server (vLLM, Ollama's ``/v1`` …); ``ChatOpenAI`` works unchanged.
"""

from __future__ import annotations

import logging

from langchain_openai import ChatOpenAI

from legis_rag.config import Settings, settings

logger = logging.getLogger(__name__)


def get_llm(config: Settings = settings, temperature: float | None = None) -> ChatOpenAI:
    """Return the configured chat model.

    The client carries ``config.request_timeout`` and no retries; a failed
    call surfaces to the caller immediately.
    """
    kwargs: dict = {
        "model": config.llm_model_name,
        "temperature": config.llm_temperature if temperature is None else temperature,
        "timeout": config.request_timeout,
        "max_retries": 0,
    }

    if config.llm_base_url:
        logger.info("Using OpenAI-compatible endpoint: %s", config.llm_base_url)
        kwargs["base_url"] = config.llm_base_url
        # Self-hosted servers rarely need a key; LangChain requires a non-empty value.
        kwargs["api_key"] = config.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = config.openai_api_key

    return ChatOpenAI(**kwargs)
