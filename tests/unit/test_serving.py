"""Unit tests for the serving layer."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from langchain_core.messages import AIMessage

from document_rag.engine import DocumentQA
from document_rag.errors import HealthCheckFailure, IngestionFailure, StoreSealedError
from document_rag.ingestion.embedder import EmbeddingGateway
from document_rag.serving.app import _ingest_in_background, create_app
from tests.fakes import RecordingEmbeddings


def _engine(provider: RecordingEmbeddings | None = None) -> DocumentQA:
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=AIMessage(content="It is about topics."))
    return DocumentQA(
        EmbeddingGateway(provider or RecordingEmbeddings(), timeout=5.0),
        llm=llm,
        default_k=2,
        chunk_size=80,
        chunk_overlap=0,
    )


@pytest.fixture()
def ready_engine(sample_document: str) -> DocumentQA:
    engine = _engine()
    asyncio.run(engine.ingest(sample_document))
    return engine


@pytest.fixture()
def client(ready_engine: DocumentQA) -> TestClient:
    with TestClient(create_app(ready_engine)) as test_client:
        yield test_client


def test_health_endpoint() -> None:
    """GET /health should return 200 with status ok."""
    from document_rag.serving.app import app

    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestReadiness:
    def test_ready_after_ingestion(self, client: TestClient) -> None:
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready", "chunks": 8}

    def test_not_ready_before_ingestion(self) -> None:
        with TestClient(create_app(_engine())) as client:
            assert client.get("/ready").status_code == 503
            response = client.post("/api/chat", json={"question": "anything"})
            assert response.status_code == 503
            assert client.post("/api/retrieve", json={"question": "anything"}).status_code == 503

    def test_not_ready_without_engine(self) -> None:
        client = TestClient(create_app())
        assert client.get("/ready").status_code == 503
        assert client.post("/api/retrieve", json={"question": "q"}).status_code == 503


class TestChat:
    def test_answers_question(self, client: TestClient, ready_engine: DocumentQA) -> None:
        question = ready_engine.store.all_records()[0].text
        response = client.post("/api/chat", json={"question": question})
        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == "It is about topics."
        assert len(body["sources"]) == 2
        assert body["sources"][0]["text"] == question

    @pytest.mark.parametrize("payload", [{}, {"question": ""}, {"question": "   "}])
    def test_missing_question_is_bad_request(self, client: TestClient, payload: dict) -> None:
        response = client.post("/api/chat", json=payload)
        assert response.status_code == 400
        assert "question" in response.json()["detail"]

    def test_provider_failure_is_bad_gateway(self, sample_document: str) -> None:
        engine = _engine(RecordingEmbeddings(fail_on=("unreachable",)))
        asyncio.run(engine.ingest(sample_document))
        with TestClient(create_app(engine)) as client:
            response = client.post("/api/chat", json={"question": "unreachable provider"})
        assert response.status_code == 502


class TestRetrieve:
    def test_returns_ranked_results(self, client: TestClient, ready_engine: DocumentQA) -> None:
        question = ready_engine.store.all_records()[3].text
        response = client.post("/api/retrieve", json={"question": question, "k": 3})
        assert response.status_code == 200
        results = response.json()["results"]
        assert len(results) == 3
        assert results[0]["text"] == question
        scores = [r["score"] for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_default_k(self, client: TestClient) -> None:
        response = client.post("/api/retrieve", json={"question": "topic"})
        assert len(response.json()["results"]) == 2

    def test_invalid_k_rejected(self, client: TestClient) -> None:
        response = client.post("/api/retrieve", json={"question": "topic", "k": 0})
        assert response.status_code == 422


class TestStartup:
    def test_ingests_document_on_startup(self, tmp_path: Path, sample_document: str) -> None:
        doc = tmp_path / "book.txt"
        doc.write_text(sample_document, encoding="utf-8")
        engine = _engine()
        with TestClient(create_app(engine, document_path=doc)) as client:
            assert engine.ready
            assert client.get("/ready").json()["chunks"] == 8

    def test_ingestion_failure_aborts_startup(self, tmp_path: Path) -> None:
        app = create_app(_engine(), document_path=tmp_path / "missing.pdf")
        with pytest.raises(IngestionFailure):
            with TestClient(app):
                pass

    def test_health_check_failure_aborts_startup(self, tmp_path: Path) -> None:
        provider = MagicMock()
        provider.aembed_query = AsyncMock(side_effect=ConnectionError("refused"))
        app = create_app(DocumentQA(EmbeddingGateway(provider)), document_path=tmp_path / "book.pdf")
        with pytest.raises(HealthCheckFailure):
            with TestClient(app):
                pass

    def test_background_ingestion(self, tmp_path: Path, sample_document: str) -> None:
        doc = tmp_path / "book.txt"
        doc.write_text(sample_document, encoding="utf-8")
        engine = _engine(RecordingEmbeddings(delay=0.01))
        with TestClient(create_app(engine, document_path=doc, ingest_in_background=True)) as client:
            for _ in range(200):
                if client.get("/ready").status_code == 200:
                    break
                time.sleep(0.01)
            assert engine.ready

    def test_background_ingestion_logs_unexpected_errors(self, caplog: pytest.LogCaptureFixture) -> None:
        engine = _engine()
        with patch.object(engine, "ingest_file", side_effect=StoreSealedError("store already sealed")):
            with caplog.at_level("ERROR", logger="document_rag.serving.app"):
                asyncio.run(_ingest_in_background(engine, "book.txt"))
        assert "Unexpected error during background ingestion" in caplog.text
        assert not engine.ready

    def test_shutdown_cancels_and_awaits_background_ingestion(self, tmp_path: Path) -> None:
        doc = tmp_path / "book.txt"
        cancelled: list[Path] = []

        async def slow_ingest(path: Path) -> None:
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                cancelled.append(path)
                raise

        engine = _engine()
        with patch.object(engine, "ingest_file", side_effect=slow_ingest):
            with TestClient(create_app(engine, document_path=doc, ingest_in_background=True)) as client:
                assert client.get("/ready").status_code == 503
        assert cancelled == [doc]
