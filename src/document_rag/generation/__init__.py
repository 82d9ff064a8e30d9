"""
Generation — prompt assembly and the chat model that answers questions.
"""

from document_rag.generation.prompts import build_rag_prompt, format_context

__all__ = ["build_rag_prompt", "format_context"]
