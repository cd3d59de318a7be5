"""
Document text extraction.

Turns uploaded document bytes into plain text.  PDFs are read with
``pdfplumber`` and Word documents with ``python-docx``; anything else
is decoded as UTF-8.  A malformed document never fails the request:
the error is logged and the artifact's text is treated as empty, so it
simply produces no chunks.
"""

from __future__ import annotations

import io
import logging
import os

import docx  # type: ignore
import pdfplumber  # type: ignore

logger = logging.getLogger(__name__)


def _pdf_text(data: bytes) -> str:
    pages = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            pages.append(page.extract_text() or "")
    return "\n".join(pages)


def _docx_text(data: bytes) -> str:
    document = docx.Document(io.BytesIO(data))
    return "\n".join(p.text for p in document.paragraphs)


def document_type(filename: str) -> str:
    """File extension without the dot, defaulting to ``pdf``."""
    ext = os.path.splitext(filename or "")[1].lower().lstrip(".")
    return ext or "pdf"


def extract_text(data: bytes, filename: str) -> str:
    """Extract text from an uploaded document.

    Args:
        data: Raw file contents.
        filename: Original file name; its extension selects the reader.

    Returns:
        The document text, or ``""`` if it could not be read.
    """
    if not data:
        return ""
    kind = document_type(filename)
    try:
        if kind == "pdf":
            return _pdf_text(data)
        if kind == "docx":
            return _docx_text(data)
        return data.decode("utf-8", errors="ignore")
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to extract text from %s: %s", filename, exc)
        return ""


def extract_text_from_file(file_path: str) -> str:
    """Read a document from disk and extract its text."""
    with open(file_path, "rb") as f:
        data = f.read()
    return extract_text(data, os.path.basename(file_path))
