"""Exception taxonomy for ingestion and retrieval.

Every error raised by the package derives from :class:`DocumentRAGError`
so the serving layer can catch the whole family in one place and map
each subclass to its own response code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from document_rag.ingestion.pipeline import IngestionReport


def preview(text: str, limit: int = 60) -> str:
    """Return a short, single-line excerpt of *text* for error messages."""
    flat = " ".join(text.split())
    return flat if len(flat) <= limit else flat[: limit - 1] + "…"


class DocumentRAGError(Exception):
    """Base class for all package errors."""


class DimensionMismatchError(DocumentRAGError):
    """A vector's dimension disagrees with the dimension already established.

    Attributes
    ----------
    expected:
        Dimension of the store (or the left-hand vector).
    actual:
        Dimension of the offending vector.
    context:
        Where the mismatch was detected, e.g. ``"append (record 3)"``.
    """

    def __init__(self, expected: int, actual: int, context: str = "") -> None:
        self.expected = expected
        self.actual = actual
        self.context = context
        where = f" during {context}" if context else ""
        super().__init__(f"Vector dimension mismatch{where}: expected {expected}, got {actual}")


class EmbeddingProviderError(DocumentRAGError):
    """The embedding provider failed or returned an unusable vector."""

    def __init__(self, message: str, *, text: str | None = None) -> None:
        self.text = text
        if text is not None:
            message = f"{message} (input: {preview(text)!r})"
        super().__init__(message)


class IngestionFailure(DocumentRAGError):
    """Ingestion could not produce a usable store; startup must abort."""

    def __init__(self, message: str, *, report: IngestionReport | None = None) -> None:
        self.report = report
        super().__init__(message)


class HealthCheckFailure(DocumentRAGError):
    """The embedding path is not usable, so the service must not start."""


class NotReadyError(DocumentRAGError):
    """A query arrived before ingestion completed."""

    def __init__(self, message: str = "The document has not been ingested yet.") -> None:
        super().__init__(message)


class StoreSealedError(DocumentRAGError):
    """A write was attempted on a vector store that is already sealed."""
