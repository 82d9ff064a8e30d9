"""Document loaders — thin wrappers around LangChain document loaders."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from langchain_community.document_loaders import PyPDFLoader, TextLoader

if TYPE_CHECKING:
    from langchain_core.documents import Document

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = frozenset({".txt", ".md", ".markdown"})


def load_pdf(path: str | Path) -> list[Document]:
    """Load a single PDF file, one ``Document`` per page."""
    return PyPDFLoader(str(path)).load()


def load_text(path: str | Path) -> list[Document]:
    """Load a plain-text or Markdown file."""
    return TextLoader(str(path), encoding="utf-8").load()


def load_document_text(path: str | Path) -> str:
    """Return the full extracted text of the document at *path*.

    PDF pages are joined with a blank line so page breaks read as
    paragraph boundaries to the chunker.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    ValueError
        If the file type is not supported.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Document not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".pdf":
        pages = load_pdf(path)
    elif suffix in TEXT_SUFFIXES:
        pages = load_text(path)
    else:
        raise ValueError(f"Unsupported document type {suffix!r} for {path}")

    text = "\n\n".join(page.page_content for page in pages)
    logger.info("Loaded %s: %d page(s), %d characters", path.name, len(pages), len(text))
    return text
