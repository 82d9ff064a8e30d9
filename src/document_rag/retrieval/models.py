"""Domain models for stored chunks and scored retrieval results."""

from __future__ import annotations

import math
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

EmbeddingVector = tuple[float, ...]
"""Fixed-dimension embedding.  Tuples keep vectors immutable once produced."""


@dataclass(frozen=True)
class StoreRecord:
    """One embedded chunk held by the :class:`~document_rag.retrieval.store.VectorStore`.

    Attributes
    ----------
    text:
        The chunk text handed to the LLM when this record is retrieved.
    vector:
        The chunk's embedding.
    """

    text: str
    vector: EmbeddingVector

    def __post_init__(self) -> None:
        if not self.vector:
            raise ValueError("StoreRecord vector must not be empty")
        if not all(math.isfinite(x) for x in self.vector):
            raise ValueError("StoreRecord vector must contain only finite values")

    @property
    def dimension(self) -> int:
        return len(self.vector)


class ScoredResult(BaseModel):
    """A retrieved chunk and its cosine similarity to the query."""

    model_config = ConfigDict(frozen=True)

    text: str
    score: float = Field(ge=-1.0, le=1.0)

    def __str__(self) -> str:  # noqa: D105
        return f"[{self.score:.4f}] {self.text[:120]}…"
