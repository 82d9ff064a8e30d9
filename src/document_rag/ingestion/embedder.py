"""Embedding gateway — text in, validated fixed-dimension vector out.

The gateway wraps any LangChain :class:`~langchain_core.embeddings.Embeddings`
implementation.  It adds what the raw provider lacks: a timeout per call,
validation of the returned vector, and a single error type
(:class:`~document_rag.errors.EmbeddingProviderError`) for every way a call
can go wrong.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from document_rag.config import settings
from document_rag.errors import EmbeddingProviderError, HealthCheckFailure

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from document_rag.retrieval.models import EmbeddingVector

logger = logging.getLogger(__name__)

HEALTH_CHECK_PROBE = "health check"


def get_embedding_function(
    backend: str | None = None,
    model: str | None = None,
) -> Embeddings:
    """Return the configured LangChain embedding provider.

    ``"ollama"`` talks to the Ollama server at ``settings.ollama_host``;
    ``"huggingface"`` runs a sentence-transformer model in-process.
    Unset arguments fall back to the current settings.
    """
    backend = backend or settings.embedding_backend
    model = model or settings.embedding_model
    if backend == "ollama":
        from langchain_ollama import OllamaEmbeddings

        return OllamaEmbeddings(model=model, base_url=settings.ollama_host)
    if backend == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(model_name=model)
    raise ValueError(f"Unknown embedding backend: {backend!r}")


def _to_vector(raw: Any, text: str) -> EmbeddingVector:
    """Validate a provider response and freeze it into a tuple of floats."""
    if raw is None or isinstance(raw, (str, bytes, Mapping)):
        raise EmbeddingProviderError(
            f"Provider returned {type(raw).__name__} instead of a vector", text=text
        )
    try:
        vector = tuple(float(x) for x in raw)
    except (TypeError, ValueError) as exc:
        raise EmbeddingProviderError("Provider returned a malformed vector", text=text) from exc
    if not vector:
        raise EmbeddingProviderError("Provider returned an empty vector", text=text)
    if not all(math.isfinite(x) for x in vector):
        raise EmbeddingProviderError("Provider returned non-finite vector components", text=text)
    return vector


class EmbeddingGateway:
    """Single entry point for embedding calls at ingestion and query time.

    Parameters
    ----------
    provider:
        Any LangChain ``Embeddings`` implementation.  When *None*, the
        provider from :func:`get_embedding_function` is used.
    timeout:
        Seconds allowed per call.  Defaults to ``EMBED_TIMEOUT_SECONDS``.
    expected_dimension:
        If known, vectors of any other dimension are rejected.  Learned
        automatically by :meth:`health_check` when unset.
    """

    def __init__(
        self,
        provider: Embeddings | None = None,
        *,
        timeout: float | None = None,
        expected_dimension: int | None = None,
    ) -> None:
        self._provider = provider if provider is not None else get_embedding_function()
        self.timeout = timeout if timeout is not None else settings.embed_timeout_seconds
        self.expected_dimension = expected_dimension

    async def embed(self, text: str) -> EmbeddingVector:
        """Embed *text* with one outbound provider call.

        Raises
        ------
        EmbeddingProviderError
            On provider failure, timeout, or an invalid result.
        """
        try:
            raw = await asyncio.wait_for(self._provider.aembed_query(text), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            raise EmbeddingProviderError(
                f"Embedding call timed out after {self.timeout}s", text=text
            ) from exc
        except Exception as exc:
            raise EmbeddingProviderError(f"Embedding provider failed: {exc}", text=text) from exc

        vector = _to_vector(raw, text)
        if self.expected_dimension is not None and len(vector) != self.expected_dimension:
            raise EmbeddingProviderError(
                f"Provider returned a {len(vector)}-dimensional vector, "
                f"expected {self.expected_dimension}",
                text=text,
            )
        return vector

    async def health_check(self) -> int:
        """Embed a probe string and return the provider's vector dimension.

        Raises
        ------
        HealthCheckFailure
            If the probe cannot be embedded.
        """
        try:
            vector = await self.embed(HEALTH_CHECK_PROBE)
        except EmbeddingProviderError as exc:
            raise HealthCheckFailure(f"Embedding provider is not usable: {exc}") from exc

        if self.expected_dimension is None:
            self.expected_dimension = len(vector)
        logger.info("Embedding provider reachable (dim=%d)", len(vector))
        return len(vector)
