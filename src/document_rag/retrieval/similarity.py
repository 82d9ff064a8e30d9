"""Cosine similarity and exact top-k search over a :class:`VectorStore`.

The search is a brute-force scan: every record is scored on every query,
which costs O(n·D) for *n* records of dimension *D*.  That is the intended
operating point for a single document (records in the low thousands).  A
store far beyond that scale would need an approximate nearest-neighbour
index instead, which this module deliberately does not provide.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from document_rag.errors import DimensionMismatchError
from document_rag.retrieval.models import ScoredResult
from document_rag.retrieval.store import VectorStore


def _unit_scale(vectors: np.ndarray) -> np.ndarray:
    """Divide each vector (last axis) by its largest absolute component.

    Cosine is scale-invariant, and after this every nonzero vector has a
    component of magnitude 1, so its norm and dot products can neither
    overflow nor underflow to zero.  All-zero vectors are left as zeros.
    """
    peaks = np.max(np.abs(vectors), axis=-1, keepdims=True)
    scaled = np.zeros_like(vectors)
    np.divide(vectors, peaks, out=scaled, where=peaks != 0)
    return scaled


def _check_finite(vector: np.ndarray, context: str) -> None:
    if not np.all(np.isfinite(vector)):
        raise ValueError(f"{context} vector contains non-finite values")


def _cosine_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Score every row of *matrix* against *query*.

    Rows (or a query) with a norm of exactly zero score ``0.0``.
    """
    matrix = _unit_scale(matrix)
    query = _unit_scale(query)
    dots = matrix @ query
    denominators = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    scores = np.zeros_like(dots)
    np.divide(dots, denominators, out=scores, where=denominators != 0)
    # Rounding can push |score| a hair past 1.
    return np.clip(scores, -1.0, 1.0)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return ``dot(a, b) / (‖a‖·‖b‖)``, or ``0.0`` when either norm is zero.

    Raises
    ------
    DimensionMismatchError
        If *a* and *b* have different lengths.
    ValueError
        If either vector holds NaN or infinity.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b), "cosine similarity")
    left = np.asarray(a, dtype=np.float64).reshape(1, -1)
    right = np.asarray(b, dtype=np.float64)
    _check_finite(left, "Left")
    _check_finite(right, "Right")
    return float(_cosine_scores(left, right)[0])


def search(store: VectorStore, query_vector: Sequence[float], k: int) -> list[ScoredResult]:
    """Return the *k* records most similar to *query_vector*, best first.

    Parameters
    ----------
    store:
        The store to scan.  An empty store yields ``[]`` for any query.
    query_vector:
        Embedding of the query; must match the store's dimension.
    k:
        Maximum number of results (``k >= 1``).

    Returns
    -------
    list[ScoredResult]
        At most *k* results sorted by descending score.  Equal scores keep
        the store's insertion order.

    Raises
    ------
    ValueError
        If ``k < 1`` or the query holds NaN or infinity.
    DimensionMismatchError
        If the query dimension differs from the store's.
    """
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")

    records = store.all_records()
    if not records:
        return []

    if len(query_vector) != store.dimension:
        raise DimensionMismatchError(store.dimension or 0, len(query_vector), "search")

    query = np.asarray(query_vector, dtype=np.float64)
    _check_finite(query, "Query")
    scores = _cosine_scores(store.as_matrix(), query)
    order = np.argsort(-scores, kind="stable")[:k]
    return [ScoredResult(text=records[i].text, score=float(scores[i])) for i in order]
