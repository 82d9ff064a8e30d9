"""In-memory vector store populated once by ingestion.

Lifecycle
---------
1. Created empty.
2. Filled by a single :meth:`VectorStore.append` call from the ingestion
   orchestrator.
3. :meth:`VectorStore.seal` marks the end of ingestion.  From then on the
   store is read-only and may be shared by any number of concurrent
   retrieval calls without locking.

``is_sealed`` doubles as the readiness barrier for the serving layer.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np

from document_rag.errors import DimensionMismatchError, StoreSealedError
from document_rag.retrieval.models import StoreRecord

logger = logging.getLogger(__name__)

EXACT_SCAN_LIMIT = 10_000
"""Record count past which a linear scan per query stops being cheap."""


class VectorStore:
    """Append-once, then read-only, collection of :class:`StoreRecord`."""

    def __init__(self) -> None:
        self._records: list[StoreRecord] = []
        self._dimension: int | None = None
        self._matrix: np.ndarray | None = None
        self._sealed = False

    # -- write phase ----------------------------------------------------------

    def append(self, records: Iterable[StoreRecord]) -> None:
        """Bulk-add *records*.

        The batch is validated as a whole before anything is added, so a
        :class:`DimensionMismatchError` leaves the store untouched.

        Raises
        ------
        StoreSealedError
            If called after :meth:`seal`.
        DimensionMismatchError
            If a record's dimension differs from the store's (or, for an
            empty store, from the first record of the batch).
        """
        if self._sealed:
            raise StoreSealedError("Cannot append to a sealed vector store")

        batch = list(records)
        if not batch:
            return

        expected = self._dimension if self._dimension is not None else batch[0].dimension
        for position, record in enumerate(batch):
            if record.dimension != expected:
                raise DimensionMismatchError(
                    expected,
                    record.dimension,
                    f"append (record {position}: {record.text[:40]!r})",
                )

        self._records.extend(batch)
        self._dimension = expected

    def seal(self) -> None:
        """Freeze the store and precompute the matrix used by the scan."""
        if self._sealed:
            return
        self._matrix = self._build_matrix()
        self._sealed = True
        if len(self._records) > EXACT_SCAN_LIMIT:
            logger.warning(
                "Vector store holds %d records; exact search scans all of them "
                "on every query and an approximate index would be needed at this scale",
                len(self._records),
            )
        logger.info("Vector store sealed: %d records (dim=%s)", len(self._records), self._dimension)

    # -- read phase -----------------------------------------------------------

    @property
    def is_sealed(self) -> bool:
        return self._sealed

    @property
    def dimension(self) -> int | None:
        """Dimension shared by every record, ``None`` while empty."""
        return self._dimension

    def size(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def all_records(self) -> tuple[StoreRecord, ...]:
        """Return every record in insertion order."""
        return tuple(self._records)

    def as_matrix(self) -> np.ndarray:
        """Return the ``(n, D)`` float matrix of all vectors.

        The sealed store hands out its cached, read-only matrix; before
        sealing a fresh matrix is built on every call.
        """
        if self._matrix is not None:
            return self._matrix
        return self._build_matrix()

    # -- internals ------------------------------------------------------------

    def _build_matrix(self) -> np.ndarray:
        if not self._records:
            return np.zeros((0, self._dimension or 0), dtype=np.float64)
        matrix = np.array([r.vector for r in self._records], dtype=np.float64)
        matrix.setflags(write=False)
        return matrix
