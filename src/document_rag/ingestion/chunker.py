"""Text chunking strategies."""

from __future__ import annotations

from langchain_text_splitters import RecursiveCharacterTextSplitter

# Paragraph, line, sentence, word, then a hard character cut.
SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


def split_text(text: str, chunk_size: int = 1000, chunk_overlap: int = 100) -> list[str]:
    """Split *text* into overlapping chunks for embedding.

    Splitting is deterministic: the same input and parameters always give
    the same chunks.  Chunks are trimmed of surrounding whitespace, so
    whitespace sitting exactly on a boundary is the only text that does
    not reappear in the output.

    Parameters
    ----------
    text:
        Raw text extracted from the document.
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Approximate number of characters shared by consecutive chunks.

    Returns
    -------
    list[str]
        Chunks in document order; ``[]`` for empty or blank input.

    Raises
    ------
    ValueError
        Unless ``chunk_size > chunk_overlap >= 0``.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if not 0 <= chunk_overlap < chunk_size:
        raise ValueError(
            f"chunk_overlap must be in [0, chunk_size), got {chunk_overlap} for chunk_size={chunk_size}"
        )

    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=len,
        separators=SEPARATORS,
        keep_separator="end",
    )
    return splitter.split_text(text)
