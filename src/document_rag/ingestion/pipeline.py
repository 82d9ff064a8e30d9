"""Startup ingestion: document text → chunks → embeddings → sealed store.

Policy
------
Ingestion is best-effort per chunk and fatal only as a whole:

* a chunk whose embedding call fails is dropped with a warning;
* :class:`~document_rag.errors.IngestionFailure` is raised only when the
  document cannot be read, yields no chunks, or no chunk survives
  embedding.

Embedding calls fan out concurrently, bounded by ``max_concurrency``, and
are joined before anything is written to the store.  The store is sealed
only after a successful append, so a failed ingestion leaves it empty and
not ready.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from pydantic import BaseModel, Field

from document_rag.config import settings
from document_rag.errors import (
    DimensionMismatchError,
    EmbeddingProviderError,
    IngestionFailure,
    StoreSealedError,
)
from document_rag.ingestion.chunker import split_text
from document_rag.ingestion.embedder import EmbeddingGateway
from document_rag.ingestion.loader import load_document_text
from document_rag.retrieval.models import StoreRecord
from document_rag.retrieval.store import VectorStore

logger = logging.getLogger(__name__)


class IngestionReport(BaseModel):
    """Outcome of one ingestion pass."""

    total_chunks: int
    embedded_chunks: int
    dropped_chunks: list[int] = Field(default_factory=list, description="Ordinals of dropped chunks")
    dimension: int | None = None
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.embedded_chunks > 0


class IngestionOrchestrator:
    """Drives one ingestion pass into *store*.

    Parameters
    ----------
    gateway:
        Embedding gateway used for every chunk.
    store:
        Empty, unsealed store to populate.
    chunk_size, chunk_overlap:
        Forwarded to :func:`~document_rag.ingestion.chunker.split_text`.
    max_concurrency:
        Maximum number of embedding calls in flight at once.
    """

    def __init__(
        self,
        gateway: EmbeddingGateway,
        store: VectorStore,
        *,
        chunk_size: int | None = None,
        chunk_overlap: int | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        if chunk_size is None:
            chunk_size = settings.chunk_size
        if chunk_overlap is None:
            chunk_overlap = settings.chunk_overlap
        if max_concurrency is None:
            max_concurrency = settings.embed_max_concurrency
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self.gateway = gateway
        self.store = store
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.max_concurrency = max_concurrency

    async def ingest_file(self, path: str | Path) -> IngestionReport:
        """Load the document at *path* and ingest its text."""
        logger.info("Loading document %s", path)
        try:
            text = await asyncio.to_thread(load_document_text, path)
        except Exception as exc:
            raise IngestionFailure(f"Could not read document {path}: {exc}") from exc
        return await self.ingest(text)

    async def ingest(self, raw_text: str) -> IngestionReport:
        """Chunk, embed and store *raw_text*, then seal the store.

        Raises
        ------
        StoreSealedError
            If the store has already been populated by an earlier pass.
        IngestionFailure
            If no chunk could be embedded and stored.
        """
        if self.store.is_sealed:
            raise StoreSealedError("The vector store has already been ingested")

        started = time.monotonic()
        chunks = split_text(raw_text, self.chunk_size, self.chunk_overlap)
        logger.info(
            "Split document into %d chunks (size=%d, overlap=%d)",
            len(chunks),
            self.chunk_size,
            self.chunk_overlap,
        )
        if not chunks:
            raise IngestionFailure(
                "Document produced no chunks",
                report=IngestionReport(total_chunks=0, embedded_chunks=0),
            )

        records = await self._embed_all(chunks)
        kept = [r for r in records if r is not None]
        report = IngestionReport(
            total_chunks=len(chunks),
            embedded_chunks=len(kept),
            dropped_chunks=[i for i, r in enumerate(records) if r is None],
            dimension=kept[0].dimension if kept else None,
            elapsed_seconds=time.monotonic() - started,
        )

        if not kept:
            raise IngestionFailure(
                f"All {len(chunks)} chunks failed to embed",
                report=report,
            )

        try:
            self.store.append(kept)
        except DimensionMismatchError as exc:
            raise IngestionFailure(f"Inconsistent embedding dimensions: {exc}", report=report) from exc
        self.store.seal()

        if report.dropped_chunks:
            logger.warning(
                "Ingestion dropped %d of %d chunks: %s",
                len(report.dropped_chunks),
                report.total_chunks,
                report.dropped_chunks,
            )
        logger.info(
            "Ingestion complete: %d/%d chunks embedded (dim=%s) in %.1fs",
            report.embedded_chunks,
            report.total_chunks,
            report.dimension,
            report.elapsed_seconds,
        )
        return report

    # -- internals ------------------------------------------------------------

    async def _embed_all(self, chunks: list[str]) -> list[StoreRecord | None]:
        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [self._embed_chunk(i, chunk, semaphore) for i, chunk in enumerate(chunks)]
        return await asyncio.gather(*tasks)

    async def _embed_chunk(
        self,
        index: int,
        chunk: str,
        semaphore: asyncio.Semaphore,
    ) -> StoreRecord | None:
        try:
            async with semaphore:
                vector = await self.gateway.embed(chunk)
        except EmbeddingProviderError as exc:
            logger.warning("Dropping chunk %d: %s", index, exc)
            return None
        return StoreRecord(text=chunk, vector=vector)
