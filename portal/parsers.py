"""PDF-to-text decoding for uploaded order documents.

pdfplumber is tried first; pypdf is the fallback when pdfplumber fails or
returns (almost) nothing. Image-only PDFs decode to empty text rather than
an error, so the field extractor can report them.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from enum import Enum

import pdfplumber
from pypdf import PdfReader

from .config import settings

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


class FileType(str, Enum):
    """Supported file types."""
    PDF = "pdf"
    UNKNOWN = "unknown"


class ParseError(Exception):
    """Raised when a document cannot be decoded at all."""
    pass


@dataclass
class DecodedText:
    """Raw text recovered from a PDF."""
    text: str
    pages: int = 0
    method: str = "pdfplumber"


def detect_file_type(filename: str, content: bytes | None = None) -> FileType:
    """Detect file type from filename or content.

    Args:
        filename: Original filename
        content: Optional file content for magic number detection

    Returns:
        Detected FileType
    """
    if filename and filename.lower().endswith(".pdf"):
        return FileType.PDF

    if content and content.startswith(PDF_MAGIC):
        return FileType.PDF

    return FileType.UNKNOWN


def _extract_with_pdfplumber(content: bytes) -> tuple[str, int]:
    with pdfplumber.open(io.BytesIO(content)) as pdf:
        text_parts = []
        for page in pdf.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
        return "\n".join(text_parts), len(pdf.pages)


def _extract_with_pypdf(content: bytes) -> tuple[str, int]:
    reader = PdfReader(io.BytesIO(content))
    text_parts = []
    for page in reader.pages:
        page_text = page.extract_text()
        if page_text:
            text_parts.append(page_text)
    return "\n".join(text_parts), len(reader.pages)


def decode(content: bytes) -> DecodedText:
    """Decode PDF bytes into raw text.

    Args:
        content: PDF file content

    Returns:
        DecodedText; ``text`` may be empty for image-only documents

    Raises:
        ParseError: If neither pdfplumber nor pypdf can read the document
    """
    if not content:
        raise ParseError("Empty file")

    try:
        text, pages = _extract_with_pdfplumber(content)
        if len(text.strip()) >= settings.pdf.min_native_chars:
            return DecodedText(text=text, pages=pages, method="pdfplumber")
        logger.info(f"pdfplumber returned {len(text.strip())} chars, trying pypdf")
    except Exception as e:
        logger.warning(f"pdfplumber extraction failed: {e}, trying pypdf")

    try:
        text, pages = _extract_with_pypdf(content)
    except Exception as e:
        logger.error(f"pypdf extraction also failed: {e}")
        raise ParseError(f"Failed to parse PDF: {e}") from e

    return DecodedText(text=text, pages=pages, method="pypdf")
