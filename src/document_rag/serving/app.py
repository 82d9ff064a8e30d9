"""FastAPI application exposing document question answering as a REST API."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from document_rag.config import settings
from document_rag.engine import DocumentQA
from document_rag.errors import (
    DimensionMismatchError,
    EmbeddingProviderError,
    IngestionFailure,
    NotReadyError,
)
from document_rag.logging_config import configure_logging
from document_rag.retrieval.models import ScoredResult

logger = logging.getLogger(__name__)


# ── Request / Response schemas ────────────────────────────────────────
class ChatRequest(BaseModel):
    """Incoming question from the user."""

    question: str | None = None


class ChatResponse(BaseModel):
    """Answer returned by the LLM, with the chunks it was given."""

    answer: str
    sources: list[ScoredResult] = []


class RetrieveRequest(BaseModel):
    """Retrieval-only query."""

    question: str | None = None
    k: int | None = Field(default=None, ge=1)


class RetrieveResponse(BaseModel):
    results: list[ScoredResult]


# ── Startup ───────────────────────────────────────────────────────────
async def _ingest_in_background(engine: DocumentQA, path: str | Path) -> None:
    try:
        await engine.ingest_file(path)
    except IngestionFailure:
        logger.critical("Background ingestion failed; the service will stay not-ready", exc_info=True)
    except Exception:
        logger.exception("Unexpected error during background ingestion; the service will stay not-ready")


def create_app(
    engine: DocumentQA | None = None,
    *,
    document_path: str | Path | None = None,
    ingest_in_background: bool | None = None,
) -> FastAPI:
    """Build the application.

    Parameters
    ----------
    engine:
        Engine to serve.  Built from settings at startup when *None*.
    document_path:
        Document to ingest at startup.  Nothing is ingested when *None*
        or when *engine* is already ready.
    ingest_in_background:
        Accept requests while ingestion runs (queries get 503 until it
        finishes) instead of blocking startup until the store is ready.
        Defaults to ``INGEST_IN_BACKGROUND``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        qa = engine if engine is not None else DocumentQA.from_settings()
        background = (
            ingest_in_background if ingest_in_background is not None else settings.ingest_in_background
        )
        app.state.engine = qa

        task: asyncio.Task | None = None
        if document_path is not None and not qa.ready:
            if background:
                await qa.check_health()
                task = asyncio.create_task(_ingest_in_background(qa, document_path))
            else:
                # HealthCheckFailure / IngestionFailure abort startup here.
                await qa.startup(document_path)

        yield

        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    app = FastAPI(
        title="Document RAG API",
        version="0.1.0",
        description="Ask questions about a single ingested document.",
        lifespan=lifespan,
    )
    app.state.engine = engine
    _register_error_handlers(app)
    _register_routes(app)
    return app


def get_engine(request: Request) -> DocumentQA:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise NotReadyError("The service is still starting.")
    return engine


# ── Error mapping ─────────────────────────────────────────────────────
def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotReadyError)
    async def not_ready(request: Request, exc: NotReadyError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(EmbeddingProviderError)
    async def provider_failed(request: Request, exc: EmbeddingProviderError) -> JSONResponse:
        logger.error("Embedding provider error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=502, content={"detail": "The embedding provider is unavailable."})

    @app.exception_handler(DimensionMismatchError)
    async def dimension_mismatch(request: Request, exc: DimensionMismatchError) -> JSONResponse:
        logger.error("Dimension mismatch on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})


def _require_question(question: str | None) -> str:
    if question is None or not question.strip():
        raise HTTPException(status_code=400, detail='The "question" field is required.')
    return question


# ── Routes ────────────────────────────────────────────────────────────
def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/ready")
    async def ready(request: Request) -> JSONResponse:
        """Readiness probe — 200 only once the document is ingested."""
        engine = getattr(request.app.state, "engine", None)
        if engine is None or not engine.ready:
            return JSONResponse(status_code=503, content={"status": "not_ready"})
        return JSONResponse(content={"status": "ready", "chunks": engine.store.size()})

    @app.post("/api/chat", response_model=ChatResponse)
    async def chat(body: ChatRequest, engine: DocumentQA = Depends(get_engine)) -> ChatResponse:
        """Answer a question from the ingested document."""
        question = _require_question(body.question)
        result = await engine.answer(question)
        return ChatResponse(answer=result.answer, sources=result.sources)

    @app.post("/api/retrieve", response_model=RetrieveResponse)
    async def retrieve(body: RetrieveRequest, engine: DocumentQA = Depends(get_engine)) -> RetrieveResponse:
        """Return the chunks most similar to a question, without generation."""
        question = _require_question(body.question)
        results = await engine.retrieve(question, k=body.k)
        return RetrieveResponse(results=results)


app = create_app(document_path=settings.document_path)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
