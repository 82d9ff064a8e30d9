"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from document_rag.ingestion.embedder import EmbeddingGateway
from document_rag.retrieval.models import StoreRecord
from document_rag.retrieval.store import VectorStore
from tests.fakes import RecordingEmbeddings


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


SAMPLE_DOCUMENT = "\n\n".join(
    f"Paragraph {i} talks about topic number {i} in some detail." for i in range(1, 9)
)


@pytest.fixture()
def fake_provider() -> RecordingEmbeddings:
    return RecordingEmbeddings()


@pytest.fixture()
def gateway(fake_provider: RecordingEmbeddings) -> EmbeddingGateway:
    return EmbeddingGateway(fake_provider, timeout=5.0)


@pytest.fixture()
def fruit_store() -> VectorStore:
    """Sealed two-record store from the classic apple/car example."""
    store = VectorStore()
    store.append([StoreRecord("apple", (1.0, 0.0)), StoreRecord("car", (0.0, 1.0))])
    store.seal()
    return store


@pytest.fixture()
def sample_document() -> str:
    """Eight short paragraphs, each well under 80 characters."""
    return SAMPLE_DOCUMENT
