"""Unit tests for the chunker module."""

import pytest

from document_rag.ingestion.chunker import split_text


def _unique_words(n: int) -> str:
    """Text with no repeated tokens, so every chunk has a unique position."""
    sentences = []
    for s in range(n):
        words = " ".join(f"w{s}x{i}" for i in range(12))
        sentences.append(f"Sentence {s} {words}.")
    paragraphs = [" ".join(sentences[i : i + 4]) for i in range(0, n, 4)]
    return "\n\n".join(paragraphs)


def _reconstruct(text: str, chunks: list[str]) -> str:
    """Rebuild *text* by dropping the overlapping prefix of each chunk.

    Gaps between chunks may only contain the whitespace the chunker trims.
    """
    rebuilt = ""
    covered_to = 0
    previous_start = -1
    for chunk in chunks:
        start = text.find(chunk, previous_start + 1)
        assert start >= 0, f"chunk is not a substring of the source: {chunk[:40]!r}"
        end = start + len(chunk)
        if start > covered_to:
            gap = text[covered_to:start]
            assert gap.strip() == "", f"non-whitespace text lost between chunks: {gap!r}"
            rebuilt += gap
        rebuilt += text[max(start, covered_to) : end]
        covered_to = max(covered_to, end)
        previous_start = start
    return rebuilt


def test_split_long_text_into_multiple_chunks() -> None:
    """A text longer than chunk_size should be split."""
    long_text = "word " * 500  # ~2500 chars
    chunks = split_text(long_text, chunk_size=256, chunk_overlap=32)
    assert len(chunks) > 1


def test_chunks_respect_chunk_size() -> None:
    chunks = split_text(_unique_words(40), chunk_size=200, chunk_overlap=40)
    assert all(len(c) <= 200 for c in chunks)


def test_empty_input_returns_no_chunks() -> None:
    assert split_text("", chunk_size=100, chunk_overlap=10) == []


def test_blank_input_returns_no_chunks() -> None:
    assert split_text("   \n\n  ", chunk_size=100, chunk_overlap=10) == []


def test_short_input_is_a_single_chunk() -> None:
    assert split_text("Short text.", chunk_size=100, chunk_overlap=10) == ["Short text."]


def test_split_is_deterministic() -> None:
    text = _unique_words(30)
    assert split_text(text, 150, 30) == split_text(text, 150, 30)


def test_consecutive_chunks_overlap() -> None:
    text = " ".join(f"t{i}" for i in range(300))
    chunks = split_text(text, chunk_size=150, chunk_overlap=50)
    assert len(chunks) > 2
    shared = [set(a.split()) & set(b.split()) for a, b in zip(chunks, chunks[1:])]
    assert all(shared)


@pytest.mark.parametrize(("size", "overlap"), [(120, 0), (150, 30), (300, 100), (80, 79)])
def test_chunks_reconstruct_source(size: int, overlap: int) -> None:
    """Removing each chunk's overlap and re-joining gives back the text."""
    text = _unique_words(24)
    chunks = split_text(text, chunk_size=size, chunk_overlap=overlap)
    assert _reconstruct(text, chunks) == text.strip()


def test_prefers_paragraph_boundaries() -> None:
    text = "First paragraph here.\n\nSecond paragraph here."
    chunks = split_text(text, chunk_size=30, chunk_overlap=0)
    assert chunks == ["First paragraph here.", "Second paragraph here."]


def test_hard_cut_when_no_boundary() -> None:
    chunks = split_text("x" * 95, chunk_size=40, chunk_overlap=0)
    assert [len(c) for c in chunks] == [40, 40, 15]


@pytest.mark.parametrize(("size", "overlap"), [(0, 0), (-5, 0), (100, 100), (100, 150), (100, -1)])
def test_invalid_parameters_raise(size: int, overlap: int) -> None:
    with pytest.raises(ValueError):
        split_text("some text", chunk_size=size, chunk_overlap=overlap)
