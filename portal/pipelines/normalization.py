"""Text normalization utilities for matching and PDF field extraction."""
from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")
_LINE_BREAK_RE = re.compile(r"[\r\n]")
_LABEL_SEPARATOR_RE = re.compile(r"[:;]\s*")
_DASH_RE = re.compile(r"[-–—]\s*")
_EDGE_PUNCTUATION_RE = re.compile(r"^[\s:.\-]+|[\s:.\-]+$")


def normalize_whitespace(text: str) -> str:
    """Normalize whitespace: collapse multiple spaces, remove leading/trailing."""
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def normalize_punctuation(text: str) -> str:
    """Normalize label separators to ``": "`` and dash variants to ``-``."""
    text = _LABEL_SEPARATOR_RE.sub(": ", text)
    text = _DASH_RE.sub("-", text)
    return text


def strip_edge_punctuation(text: str) -> str:
    """Remove whitespace, colons, dots and dashes from both ends."""
    return _EDGE_PUNCTUATION_RE.sub("", text)


def normalize_document_text(text: str) -> str:
    """Single-line copy of extracted document text for keyword lookups.

    Line breaks become spaces, whitespace runs collapse, ``:``/``;`` become
    ``": "`` and en/em dashes become ``-``.
    """
    if not text:
        return ""

    text = _LINE_BREAK_RE.sub(" ", text)
    text = _WHITESPACE_RE.sub(" ", text)
    text = normalize_punctuation(text)
    return text.strip()
