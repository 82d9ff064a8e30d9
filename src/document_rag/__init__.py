"""
document_rag — question answering over a single document.

Ingestion splits the document into chunks, embeds them, and holds the
vectors in an in-memory store; each question is embedded and matched
against that store by cosine similarity before the best chunks are sent
to an LLM.
"""

__version__ = "0.1.0"
