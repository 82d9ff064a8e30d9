"""
Retrieval — in-memory vector store and exact cosine-similarity search.

Public surface
--------------
- :class:`VectorStore` — append-once, then read-only record store.
- :func:`search` / :func:`cosine_similarity` — exact top-k ranking.
- :class:`SemanticRetriever` — question text in, ranked chunks out.
- :class:`StoreRecord`, :class:`ScoredResult` — data models.
"""

from document_rag.retrieval.models import EmbeddingVector, ScoredResult, StoreRecord
from document_rag.retrieval.retriever import SemanticRetriever
from document_rag.retrieval.similarity import cosine_similarity, search
from document_rag.retrieval.store import VectorStore

__all__ = [
    "EmbeddingVector",
    "ScoredResult",
    "SemanticRetriever",
    "StoreRecord",
    "VectorStore",
    "cosine_similarity",
    "search",
]
