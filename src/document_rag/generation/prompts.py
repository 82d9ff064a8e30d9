"""Prompt template for grounded question answering.

The model is told to answer strictly from the retrieved context and to
admit when the context does not contain the answer.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

    from document_rag.retrieval.models import ScoredResult

CONTEXT_SEPARATOR = "\n\n---\n\n"
UNKNOWN_ANSWER = "I don't know"

RAG_SYSTEM = f"""\
You answer questions about a single document.

Use strictly the context provided by the user to answer the question.
If the answer is not in the context, reply exactly "{UNKNOWN_ANSWER}".
Do not use outside knowledge and do not invent details.
"""


def format_context(results: Sequence[ScoredResult]) -> str:
    """Join retrieved chunk texts, best first, into one context block."""
    return CONTEXT_SEPARATOR.join(r.text for r in results)


def build_rag_prompt(context: str, question: str) -> list[BaseMessage]:
    """Build the chat messages sent to the LLM for one question."""
    return [
        SystemMessage(content=RAG_SYSTEM),
        HumanMessage(content=f"Context:\n{context}\n\nQuestion: {question}\n\nAnswer:"),
    ]
