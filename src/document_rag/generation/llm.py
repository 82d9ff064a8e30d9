"""Chat model used to phrase answers from retrieved context.

Answers come from whatever OpenAI-compatible chat endpoint ``LLM_BASE_URL``
names.  The default is a local Ollama server (``/v1``), where the API key
is ignored.  Leaving ``LLM_BASE_URL`` empty targets OpenAI itself, which
then needs ``OPENAI_API_KEY``.
"""

from __future__ import annotations

import logging

from langchain_openai import ChatOpenAI

from document_rag.config import settings

logger = logging.getLogger(__name__)


def get_llm(temperature: float | None = None) -> ChatOpenAI:
    """Return the chat model configured by ``LLM_MODEL_NAME``.

    *temperature* defaults to ``LLM_TEMPERATURE``; answers are meant to be
    read off the context, so the setting defaults to ``0.0``.
    """
    if temperature is None:
        temperature = settings.llm_temperature

    base_url = settings.llm_base_url or None
    # Ollama ignores the key but the OpenAI client refuses an empty one.
    api_key = settings.openai_api_key or ("EMPTY" if base_url else None)

    logger.info(
        "Answering with %s via %s (temperature=%s)",
        settings.llm_model_name,
        base_url or "api.openai.com",
        temperature,
    )
    return ChatOpenAI(
        model=settings.llm_model_name,
        temperature=temperature,
        base_url=base_url,
        api_key=api_key,
    )
