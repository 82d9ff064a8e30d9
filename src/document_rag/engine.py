"""Composition root — the object the serving layer talks to.

:class:`DocumentQA` owns the vector store for the whole process.  During
ingestion only the :class:`IngestionOrchestrator` writes to it; once it is
sealed the same store is read by :class:`SemanticRetriever` for every
request.

Usage::

    qa = DocumentQA.from_settings()
    await qa.startup("book.pdf")             # health check + ingestion
    answer = await qa.answer("Who is the narrator?")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from document_rag.generation.prompts import build_rag_prompt, format_context
from document_rag.ingestion.embedder import EmbeddingGateway
from document_rag.ingestion.pipeline import IngestionOrchestrator, IngestionReport
from document_rag.retrieval.models import ScoredResult
from document_rag.retrieval.retriever import SemanticRetriever
from document_rag.retrieval.store import VectorStore

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

logger = logging.getLogger(__name__)


class Answer(BaseModel):
    """Generated answer together with the chunks it was grounded on."""

    answer: str
    sources: list[ScoredResult] = Field(default_factory=list)


class DocumentQA:
    """Question answering over one ingested document.

    Parameters
    ----------
    gateway:
        Embedding gateway shared by ingestion and retrieval.
    llm:
        Chat model used by :meth:`answer`.  Created lazily from settings
        when *None*, so retrieval-only callers never need one.
    default_k:
        Number of chunks retrieved per question.
    chunk_size, chunk_overlap, max_concurrency:
        Ingestion parameters, see :class:`IngestionOrchestrator`.
    """

    def __init__(
        self,
        gateway: EmbeddingGateway,
        *,
        llm: BaseChatModel | None = None,
        default_k: int | None = None,
        chunk_size: int | None = None,
        chunk_overlap: int | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        self.store = VectorStore()
        self.gateway = gateway
        self._llm = llm
        self._orchestrator = IngestionOrchestrator(
            gateway,
            self.store,
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            max_concurrency=max_concurrency,
        )
        self.retriever = SemanticRetriever(self.store, gateway, default_k=default_k)
        self.report: IngestionReport | None = None

    @classmethod
    def from_settings(cls) -> DocumentQA:
        """Build an engine wired to the configured embedding provider."""
        return cls(EmbeddingGateway())

    @property
    def ready(self) -> bool:
        """``True`` once ingestion has completed successfully."""
        return self.retriever.ready

    # -- ingestion ------------------------------------------------------------

    async def check_health(self) -> int:
        """Verify the embedding path; raises ``HealthCheckFailure``."""
        return await self.gateway.health_check()

    async def ingest(self, raw_text: str) -> IngestionReport:
        self.report = await self._orchestrator.ingest(raw_text)
        return self.report

    async def ingest_file(self, path: str | Path) -> IngestionReport:
        self.report = await self._orchestrator.ingest_file(path)
        return self.report

    async def startup(self, path: str | Path) -> IngestionReport:
        """Health-check the provider, then ingest the document at *path*."""
        await self.check_health()
        return await self.ingest_file(path)

    # -- querying -------------------------------------------------------------

    async def retrieve(self, question: str, k: int | None = None) -> list[ScoredResult]:
        return await self.retriever.retrieve(question, k=k)

    async def answer(self, question: str, k: int | None = None) -> Answer:
        """Retrieve context for *question* and ask the LLM to answer it."""
        sources = await self.retrieve(question, k=k)
        messages = build_rag_prompt(format_context(sources), question)
        response = await self.llm.ainvoke(messages)
        content = response.content if isinstance(response.content, str) else str(response.content)
        return Answer(answer=content.strip(), sources=sources)

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            from document_rag.generation.llm import get_llm

            self._llm = get_llm()
        return self._llm
