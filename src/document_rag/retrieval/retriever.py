"""Semantic retriever — question text in, ranked chunks out.

This module is the **primary public interface** for query-time retrieval.
It embeds the question through the same gateway used at ingestion and
scans the sealed store.

Usage::

    retriever = SemanticRetriever(store, gateway)
    results   = await retriever.retrieve("Who is the little prince?", k=3)
    for r in results:
        print(f"{r.score:.3f}", r.text[:80])
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from document_rag.config import settings
from document_rag.errors import NotReadyError
from document_rag.ingestion.embedder import EmbeddingGateway
from document_rag.retrieval.models import ScoredResult
from document_rag.retrieval.similarity import search
from document_rag.retrieval.store import VectorStore

logger = logging.getLogger(__name__)


class SemanticRetriever:
    """Read-side view over a sealed :class:`VectorStore`.

    Parameters
    ----------
    store:
        The store populated by ingestion.  Queries are refused until it
        is sealed.
    gateway:
        Embedding gateway used to embed questions.
    default_k:
        Default number of results returned by :meth:`retrieve`.
    score_threshold:
        Optional minimum similarity; results below it are discarded.
    """

    def __init__(
        self,
        store: VectorStore,
        gateway: EmbeddingGateway,
        *,
        default_k: int | None = None,
        score_threshold: float | None = None,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self.default_k = default_k if default_k is not None else settings.k_results
        self.score_threshold = score_threshold

    @property
    def ready(self) -> bool:
        return self._store.is_sealed

    # -- public API -----------------------------------------------------------

    async def retrieve(self, question: str, *, k: int | None = None) -> list[ScoredResult]:
        """Embed *question* and return the top-*k* chunks.

        Raises
        ------
        ValueError
            If *question* is blank or ``k < 1``.
        NotReadyError
            If ingestion has not completed.
        EmbeddingProviderError
            If the question cannot be embedded.
        DimensionMismatchError
            If the question vector does not match the store.
        """
        if not question or not question.strip():
            raise ValueError("question must not be empty")
        self._check_ready()

        query_vector = await self._gateway.embed(question)
        return self.search_by_embedding(query_vector, k=k)

    def search_by_embedding(
        self,
        embedding: Sequence[float],
        *,
        k: int | None = None,
    ) -> list[ScoredResult]:
        """Same as :meth:`retrieve` but accepts a pre-computed embedding."""
        self._check_ready()
        if k is None:
            k = self.default_k
        results = search(self._store, embedding, k)
        if self.score_threshold is not None:
            results = [r for r in results if r.score >= self.score_threshold]
        logger.debug("Retrieved %d chunks (k=%d)", len(results), k)
        return results

    # -- internals ------------------------------------------------------------

    def _check_ready(self) -> None:
        if not self._store.is_sealed:
            raise NotReadyError()
